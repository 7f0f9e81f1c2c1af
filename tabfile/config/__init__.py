"""
Configuration loading and validation for tabfile.

Provides a strongly typed settings object (output directory, text encoding,
lock prefix, log level) loaded from environment variables and .env files with
upfront validation.
"""
