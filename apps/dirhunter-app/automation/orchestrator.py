"""
DirHunter Bot Orchestrator
Runs the profiling pass and the submission pass over the directory list.
"""

import asyncio
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from browser import BrowserAutomation
from config import BotConfig, SubmissionData
from content_enhancer import ContentEnhancer, apply_suggestion
from database.operations import DatabaseOperations
from database.profile_store import (
    build_field_analysis,
    load_site_configs,
    save_field_analysis,
    save_json,
    save_site_configs,
)
from directories.csv_parser import DirectoryCSVParser, get_unsubmitted_directories
from driver import PlaywrightDriver
from errors import NavigationFailure, RevealControlNotFound
from field_stats import FieldFrequencyAggregator
from models import DirectoryRecord, SiteConfig, SubmissionResult, SubmissionState
from site_profiler import build_failure_config, build_site_config
from submission_orchestrator import SubmissionOrchestrator
from utils.helpers import get_app_data_directory, utc_timestamp
from utils.simple_logger import slog
from value_generator import generate_smart_values


class DirHunterBot:
    """
    Main orchestrator for the DirHunter bot.
    Profiles directory sites, then submits to them one at a time.
    """

    def __init__(self, config: BotConfig, stop_check: Callable[[], bool] = None,
                 db: Optional[DatabaseOperations] = None,
                 browser_factory: Callable[..., Any] = BrowserAutomation,
                 driver_factory: Callable[..., Any] = PlaywrightDriver):
        """
        Initialize the bot.

        Args:
            config: Bot configuration
            stop_check: Optional callable that returns True if stop requested
            db: Submission result store (defaults to SQLite in the app data directory)
            browser_factory: Creates the browser resource (async context manager)
            driver_factory: Wraps the browser in a driver capability
        """
        self.config = config
        self.settings = config.settings
        self._stop_requested = False
        self._external_stop_check = stop_check
        self._browser_factory = browser_factory
        self._driver_factory = driver_factory

        slog.set_detailed(self.settings.detailed_logs or self.settings.debug)

        if db is None:
            db_path = get_app_data_directory() / "dirhunter.db"
            db = DatabaseOperations(f"sqlite:///{db_path}")
        self.db = db

        # Statistics
        self.stats = {
            "total_attempts": 0,
            "successful": 0,
            "failed": 0,
            "manual": 0,
            "errors": []
        }

        slog.detail("🤖 DirHunter Bot initialized")

    def stop(self):
        """Request the bot to stop gracefully."""
        slog.detail("⏹ Stop requested, finishing current directory...")
        self._stop_requested = True

    def _stop_check(self) -> bool:
        """Check if stop has been requested."""
        if self._stop_requested:
            return True
        if self._external_stop_check and self._external_stop_check():
            return True
        stop_signal_path = get_app_data_directory() / "stop_signal.txt"
        if stop_signal_path.exists():
            slog.detail("📝 Stop signal file detected")
            self._stop_requested = True
            return True
        return False

    def _new_browser(self):
        return self._browser_factory(
            headless=self.settings.headless,
            navigation_timeout_ms=self.settings.navigation_timeout_ms,
        )

    async def _pause(self, ms: int):
        if ms > 0:
            await asyncio.sleep(ms / 1000)

    def load_directories(self) -> List[DirectoryRecord]:
        """Directory records from the CSV, status-filtered and limited."""
        records = DirectoryCSVParser(self.settings.csv_path).parse()
        if self.settings.only_unsubmitted:
            records = get_unsubmitted_directories(records)
        if self.settings.limit:
            records = records[:self.settings.limit]
        return records

    # ==================== PROFILING PASS ====================

    async def run_analysis(self, directories: Optional[List[DirectoryRecord]] = None) -> Dict[str, SiteConfig]:
        """
        Profile every directory and write the site profile and field statistics stores.

        Returns:
            Site configs keyed by directory name
        """
        logger.info("🔍 Starting site analysis...")
        if directories is None:
            directories = self.load_directories()
        if not directories:
            logger.warning("⚠️ No directories to analyze")
            return {}

        logger.info(f"📋 Analyzing {len(directories)} directories...")
        aggregator = FieldFrequencyAggregator()
        configs: Dict[str, SiteConfig] = {}
        per_site: List[Dict[str, Any]] = []

        async with self._new_browser() as browser:
            driver = self._driver_factory(browser, self.settings)
            for i, directory in enumerate(directories, 1):
                if self._stop_check():
                    slog.detail("⏹ Stop requested - stopping analysis")
                    break
                if i > 1:
                    await self._pause(self.settings.analysis_delay_ms)

                slog.directory_start(i, len(directories), directory.name, directory.url)
                config, site_record = await self._analyze_directory(driver, directory, aggregator)
                configs[directory.name] = config
                per_site.append(site_record)

        save_site_configs(self.settings.site_configs_path, configs)

        field_stats = aggregator.results()
        analysis = build_field_analysis(field_stats, per_site, total_sites=len(per_site))
        save_field_analysis(self.settings.field_analysis_path, analysis)

        logger.info(f"📊 Analyzed {analysis['successfulAnalysis']}/{analysis['totalSites']} sites")
        if field_stats:
            logger.info("📋 Most common fields:")
            for stat in field_stats[:10]:
                logger.info(f"   {stat.canonical_key}: {stat.count} occurrence(s), {stat.frequency}%")

        return configs

    async def _analyze_directory(self, driver, directory: DirectoryRecord,
                                 aggregator: FieldFrequencyAggregator) -> Tuple[SiteConfig, Dict[str, Any]]:
        """Profile one directory. Never raises: failures become manual profiles."""
        try:
            await driver.navigate(directory.target_url)
            await self._pause(self.settings.settle_delay_ms)

            if directory.reveal_control and not directory.has_submit_url:
                try:
                    await driver.reveal(directory.reveal_control)
                    await self._pause(self.settings.settle_delay_ms)
                except RevealControlNotFound as e:
                    slog.detail_warning(f"{e} - analyzing page as is")

            extraction = await driver.extract()
        except NavigationFailure as e:
            slog.submission_failed(f"Analysis failed: {e.cause}")
            return (
                build_failure_config(directory.url, e.cause),
                {"name": directory.name, "url": directory.url, "error": e.cause, "analyzedAt": utc_timestamp()},
            )
        except Exception as e:
            slog.submission_failed(f"Analysis failed: {e}")
            return (
                build_failure_config(directory.url, str(e)),
                {"name": directory.name, "url": directory.url, "error": str(e), "analyzedAt": utc_timestamp()},
            )

        aggregator.add_site(directory.name, extraction.all_fields)
        config = build_site_config(extraction, url=directory.url)

        field_count = len(config.form.fields) if config.form else 0
        slog.detail_success(
            f"Profile: method={config.submission_method.value}, mapped={field_count}, "
            f"captcha={config.requires_captcha}"
        )
        if config.manual_submission_required:
            slog.submission_manual(config.error or "manual submission required")
        else:
            logger.info(f"   ✅ {config.submission_method.value} ({len(extraction.all_fields)} fields found)")

        site_record = {
            "name": directory.name,
            "url": directory.url,
            "fields": [f.model_dump(by_alias=True) for f in extraction.all_fields],
            "metadata": extraction.metadata.model_dump(by_alias=True),
            "analyzedAt": utc_timestamp(),
        }
        return config, site_record

    # ==================== SUBMISSION PASS ====================

    async def enhance_submission(self, data: SubmissionData) -> SubmissionData:
        """Improve description/category/tags; keeps originals where nothing usable comes back."""
        enhancer = ContentEnhancer(self.config.api_keys.openai, self.settings.llm_model)
        if not enhancer.enabled:
            slog.detail_warning("AI enhancement requested but no OpenAI API key is configured")
            return data

        slog.detail("🤖 Enhancing submission content...")
        suggestion = await enhancer.generate_all({
            "url": data.url,
            "title": data.name,
            "description": data.description,
            "keywords": data.tags,
        })
        return apply_suggestion(data, suggestion)

    async def run_submissions(self, data: Optional[SubmissionData] = None,
                              directories: Optional[List[DirectoryRecord]] = None
                              ) -> List[Tuple[DirectoryRecord, SubmissionResult]]:
        """
        Submit to every directory, one at a time.

        Returns:
            (directory, result) pairs in processing order
        """
        data = data or self.config.submission
        if data is None:
            logger.error("❌ No submission data configured")
            return []

        logger.info("🚀 Starting submissions...")
        if self.settings.ai_enhance:
            data = await self.enhance_submission(data)

        site_configs = load_site_configs(self.settings.site_configs_path)
        if directories is None:
            directories = self.load_directories()
        if not directories:
            logger.warning("⚠️ No directories to submit to")
            return []

        logger.info(f"📋 Submitting to {len(directories)} directories...")
        results: List[Tuple[DirectoryRecord, SubmissionResult]] = []
        start_time = time.time()

        try:
            async with self._new_browser() as browser:
                driver = self._driver_factory(browser, self.settings)
                orchestrator = SubmissionOrchestrator(driver, self.settings, site_configs)

                for i, directory in enumerate(directories, 1):
                    if self._stop_check():
                        slog.detail("⏹ Stop requested - stopping bot")
                        break
                    if i > 1:
                        await self._pause(self.settings.inter_directory_delay_ms)

                    slog.directory_start(i, len(directories), directory.name, directory.target_url)
                    result = await orchestrator.submit(directory, data)
                    self._record_result(directory, result)
                    results.append((directory, result))
        finally:
            if results:
                count = self.db.export_json(self.settings.results_path)
                slog.detail(f"💾 Exported {count} result(s) to {self.settings.results_path}")
            self._print_summary(time.time() - start_time)

        return results

    def _record_result(self, directory: DirectoryRecord, result: SubmissionResult):
        """Persist one result and update statistics."""
        self.db.add_result(directory.name, directory.target_url, result)
        self.stats["total_attempts"] += 1

        if result.state == SubmissionState.SUCCESS:
            self.stats["successful"] += 1
            slog.submission_success(result.message)
        elif result.state == SubmissionState.MANUAL_REQUIRED:
            self.stats["manual"] += 1
            slog.submission_manual(result.message)
        else:
            self.stats["failed"] += 1
            self.stats["errors"].append((directory.name, result.message))
            slog.submission_failed(result.message)

    def _print_summary(self, elapsed_time: float):
        """Print execution summary."""
        slog.summary(self.stats["successful"], self.stats["failed"], self.stats["manual"], elapsed_time)

        slog.detail("=" * 60)
        slog.detail("📊 EXECUTION SUMMARY")
        slog.detail("=" * 60)
        slog.detail(f"⏱️  Total time: {elapsed_time:.1f}s ({elapsed_time/60:.1f}m)")
        slog.detail(f"📋 Total attempts: {self.stats['total_attempts']}")
        slog.detail(f"✅ Successful: {self.stats['successful']}")
        slog.detail(f"❌ Failed: {self.stats['failed']}")
        slog.detail(f"✋ Manual: {self.stats['manual']}")

        if self.stats["errors"]:
            logger.info("❌ Failed directories:")
            for name, message in self.stats["errors"]:
                logger.info(f"   {name}: {message}")

        slog.detail("=" * 60)

    # ==================== VALUES / STATS ====================

    async def run_value_generation(self, url: str) -> Dict[str, Any]:
        """Derive submission values from a website's metadata and save them."""
        logger.info(f"🔍 Generating values from {url}")
        async with self._new_browser() as browser:
            driver = self._driver_factory(browser, self.settings)
            await driver.navigate(url)
            await self._pause(self.settings.settle_delay_ms)
            extraction = await driver.extract()

        values = generate_smart_values(extraction.metadata, url)

        if self.settings.ai_enhance:
            enhancer = ContentEnhancer(self.config.api_keys.openai, self.settings.llm_model)
            suggestion = await enhancer.generate_all(values)
            for field in ("description", "category", "tags"):
                suggested = getattr(suggestion, field)
                if suggested is not None:
                    values[field] = suggested

        values["generatedAt"] = utc_timestamp()
        save_json(self.settings.generated_values_path, values)
        logger.success(f"💾 Generated values saved to {self.settings.generated_values_path}")
        return values

    def show_stats(self) -> Dict[str, int]:
        """Log stored result counts."""
        stats = self.db.get_result_stats()
        logger.info(
            f"📊 Stored results: {stats['total']} total, {stats['successful']} success, "
            f"{stats['failed']} failed, {stats['manual']} manual"
        )
        return stats
