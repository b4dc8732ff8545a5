#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Game Chooser - Consolidated Exception Classes

All project-specific exceptions live here so that scanning, parsing, configuration
and UI code raise and catch the same types.
"""

from datetime import datetime
from typing import Dict, Any, Optional


class BaseError(Exception):
    """Base class for all project-specific errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code or "ERROR"
        self.details = details or {}
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Converts the exception to a dictionary for structured logging."""
        return {
            'error_code': self.error_code,
            'message': str(self),
            'details': self.details,
            'timestamp': self.timestamp.isoformat()
        }


# =====================================================================================================
# Configuration-related errors
# =====================================================================================================

class ConfigurationError(BaseError):
    """Base class for configuration errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        config_details = details or {}
        if file_path:
            config_details['file_path'] = str(file_path)
        super().__init__(message, error_code or "CONFIG_ERROR", config_details)


class ValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 expected_type: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        validation_details = details or {}
        if field_name:
            validation_details['field_name'] = field_name
        if expected_type:
            validation_details['expected_type'] = expected_type
        super().__init__(message, "VALIDATION_ERROR", None, validation_details)


# =====================================================================================================
# Scanning and archive errors
# =====================================================================================================

class ScannerError(BaseError):
    """Raised when scanning a single map source fails."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 scanner_name: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        scanner_details = details or {}
        if file_path:
            scanner_details['file_path'] = str(file_path)
        if scanner_name:
            scanner_details['scanner_name'] = scanner_name
        super().__init__(message, "SCANNER_ERROR", scanner_details)


class ArchiveError(ScannerError):
    """Raised when a map archive cannot be opened or read."""

    def __init__(self, message: str, archive_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, archive_path, "archive", details)
        self.error_code = "ARCHIVE_ERROR"


class CorruptArchiveError(ArchiveError):
    """Raised when an archive lists an entry whose bytes cannot be resolved."""

    def __init__(self, message: str, archive_path: Optional[str] = None,
                 entry_name: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        archive_details = details or {}
        if entry_name:
            archive_details['entry_name'] = entry_name
        super().__init__(message, archive_path, archive_details)
        self.error_code = "CORRUPT_ARCHIVE"
        self.entry_name = entry_name


class FileOperationError(BaseError):
    """Raised when file operation errors occur."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 operation: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        file_details = details or {}
        if file_path:
            file_details['file_path'] = str(file_path)
        if operation:
            file_details['operation'] = operation
        super().__init__(message, "FILE_OP_ERROR", file_details)


# =====================================================================================================
# Descriptor errors
# =====================================================================================================

class DescriptorError(BaseError):
    """Base class for game descriptor failures (the "other parse error" case)."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 uri: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        descriptor_details = details or {}
        if uri:
            descriptor_details['uri'] = str(uri)
        super().__init__(message, error_code or "DESCRIPTOR_ERROR", descriptor_details)
        self.uri = uri


class EngineVersionError(DescriptorError):
    """Raised when a descriptor needs a newer engine than the one running."""

    def __init__(self, message: str, uri: Optional[str] = None,
                 required_version: Optional[str] = None,
                 engine_version: Optional[str] = None):
        details: Dict[str, Any] = {}
        if required_version:
            details['required_version'] = required_version
        if engine_version:
            details['engine_version'] = engine_version
        super().__init__(message, "ENGINE_VERSION", uri, details)
        self.required_version = required_version
        self.engine_version = engine_version


class DescriptorParseError(DescriptorError):
    """Raised when a descriptor document is not well-formed."""

    def __init__(self, message: str, uri: Optional[str] = None,
                 line: Optional[int] = None, column: Optional[int] = None):
        details: Dict[str, Any] = {}
        if line is not None:
            details['line'] = line
        if column is not None:
            details['column'] = column
        super().__init__(message, "DESCRIPTOR_PARSE", uri, details)
        self.line = line
        self.column = column


# =====================================================================================================
# User interaction errors
# =====================================================================================================

class InteractionError(BaseError):
    """Raised when a confirmation request cannot be presented to the user."""

    def __init__(self, message: str, title: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        interaction_details = details or {}
        if title:
            interaction_details['title'] = title
        super().__init__(message, "INTERACTION_ERROR", interaction_details)
