VERSION = "2.0.0"
APP_NAME = "vocabmaster"
