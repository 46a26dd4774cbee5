__license__ = "MIT License"
__version__ = "1.0.0"
