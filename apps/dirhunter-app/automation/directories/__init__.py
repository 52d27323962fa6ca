"""Directory-list loading."""

from .csv_parser import DirectoryCSVParser, filter_by_status, get_unsubmitted_directories

__all__ = ['DirectoryCSVParser', 'filter_by_status', 'get_unsubmitted_directories']
