"""Services for the social report normalizer."""

from social_report.services.workbook_reader import WorkbookReader

__all__ = ["WorkbookReader"]
