"""vocabmaster: spaced-repetition scheduling and study session engine."""

from vocabmaster.consts import VERSION

__version__ = VERSION
