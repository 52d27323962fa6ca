"""
Simple Logger for DirHunter.
Provides clean, user-friendly logs by default with optional detailed mode.
"""

from loguru import logger


class SimpleLogger:
    """
    Conditional logger that shows simple one-liner logs by default,
    or detailed logs when detailed_logs=True.

    Simple mode: Only major events (directory processing, outcome, skip reasons)
    Detailed mode: Full technical details (all current logs)
    """

    def __init__(self, detailed: bool = False):
        self.detailed = detailed

    def set_detailed(self, detailed: bool):
        """Update detailed logging mode."""
        self.detailed = detailed

    # === ALWAYS SHOWN (both simple and detailed) ===

    def directory_start(self, index: int, total: int, name: str, url: str = ""):
        """Log start of directory processing - always shown."""
        display_url = url[:60] + "..." if len(url) > 60 else url
        url_info = f" ({display_url})" if display_url else ""
        logger.info(f"📍 [{index}/{total}] {name}{url_info}")

    def submission_success(self, message: str = ""):
        """Log successful submission - always shown."""
        info = f" - {message[:80]}" if message else ""
        logger.success(f"✅ Submitted{info}")

    def submission_failed(self, reason: str):
        """Log failed submission - always shown."""
        logger.error(f"❌ Failed: {reason[:80]}")

    def submission_manual(self, reason: str):
        """Log a directory that needs manual submission - always shown."""
        logger.warning(f"✋ Manual: {reason[:80]}")

    def summary(self, successful: int, failed: int, manual: int, time_sec: float):
        """Log final summary - always shown."""
        logger.info(f"📊 Done: {successful} success, {failed} failed, {manual} manual ({time_sec:.0f}s)")

    # === DETAILED MODE ===
    # These always log to file (DEBUG level captures all).
    # Console display depends on the --debug flag.

    def detail(self, message: str):
        """Log detailed message - always to file, console if debug mode."""
        logger.debug(message)

    def detail_success(self, message: str):
        """Log detailed success - always to file, console if debug mode."""
        logger.debug(f"✓ {message}")

    def detail_warning(self, message: str):
        """Log detailed warning - always to file, console if debug mode."""
        logger.debug(f"⚠ {message}")

    def detail_debug(self, message: str):
        """Log debug info - always to file, console if debug mode."""
        logger.debug(message)


# Global simple logger instance - will be configured by bot
slog = SimpleLogger(detailed=False)
