#!/usr/bin/env python3
"""
Main orchestrator for the ROLIE feed checker.

This module coordinates one check run against a CSAF provider:
1. Provider metadata: Fetch and parse provider-metadata.json
2. Feeds: Fetch every ROLIE feed, check TLP labels and completeness
3. Service document: Reconcile service.json with the declared feeds
4. TLS: Report URLs that were not served over HTTPS
5. Reporting: Finalize metrics and write a Markdown report

The orchestrator is designed to be:
- Tolerant: A broken feed degrades coverage but never aborts the run
- Observable: Every finding lands in an issue sink and in the report
- Strict about its input: An unusable provider metadata URL or document
  aborts the run

Usage:
    python -m rolie_checker.run_checker [--config path/to/config.yaml]
"""
import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import requests
import yaml

from rolie_checker.compliance import (
    ALL_LABELS,
    FeedComplianceEngine,
    FeedScanResult,
    IntegrityWalker,
    InvalidURL,
    ServiceDocumentReconciler,
    resolve_url,
)
from rolie_checker.ingestion import HttpClient, ProviderMetadata, RolieFeedLoader
from rolie_checker.observability import Issues, ScanMetrics, ScanReporter

logger = logging.getLogger(__name__)


class FeedChecker:
    """
    Orchestrates a check run against one provider.

    Design decisions:
    - All components share one HttpClient and one Issues bundle
    - Collaborators are wired here and injected, never looked up globally
    - Fatal errors are logged and re-raised as RuntimeError
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        client: Optional[HttpClient] = None,
    ):
        """
        Initialize checker with configuration.

        Args:
            config_path: Path to YAML configuration file (default: config.yaml)
            config: Already loaded configuration, takes precedence over the file
            client: HTTP client to use instead of one built from the config

        Raises:
            FileNotFoundError: If the configuration file does not exist
            ValueError: If required configuration keys are missing
            InvalidURL: If the provider metadata URL is not usable
        """
        if config is None:
            self.config_path = Path(config_path or "config.yaml")
            if not self.config_path.exists():
                raise FileNotFoundError(f"Config file not found: {self.config_path}")
            with open(self.config_path) as f:
                config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError("Configuration must be a mapping")
        if not config.get("provider_metadata_url"):
            raise ValueError("Missing required config key: provider_metadata_url")

        self.config = config
        self.pmd_url = config["provider_metadata_url"]

        checks = config.get("checks") or {}
        self.check_service_document = bool(checks.get("service_document", True))

        report_config = config.get("report") or {}
        self.output_dir = Path(report_config.get("output_dir", "output"))
        self.save_reports = bool(report_config.get("save", True))

        # Initialize core components
        self.issues = Issues()
        self.client = client or HttpClient.from_config(config.get("http"))
        self.loader = RolieFeedLoader(self.client, self.issues)
        self.walker = IntegrityWalker(self.client, self.issues)
        self.engine = FeedComplianceEngine(
            self.pmd_url, self.client, self.loader, self.walker, self.issues
        )
        self.reconciler = ServiceDocumentReconciler(self.pmd_url, self.client, self.issues)
        self.reporter = ScanReporter()
        self.report_path: Optional[Path] = None

        logger.info(f"Checker initialized for {self.pmd_url}")

    def run(self) -> ScanMetrics:
        """
        Execute a complete check run.

        Returns:
            ScanMetrics object with run statistics

        Raises:
            RuntimeError: If the provider metadata cannot be used or an
                unexpected error aborts the run
        """
        started_at = datetime.now(timezone.utc)
        run_id = f"run_{started_at.strftime('%Y%m%d_%H%M%S')}"
        metrics = ScanMetrics(run_id=run_id, provider_metadata_url=self.pmd_url, started_at=started_at)

        logger.info(f"=== Starting Check Run: {run_id} ===")

        try:
            # Stage 1: Provider metadata
            logger.info("Stage 1: Loading provider metadata")
            metadata = self._load_provider_metadata()

            # Stage 2: ROLIE feeds
            logger.info("Stage 2: Checking ROLIE feeds")
            result = self.engine.process_feeds(metadata.feeds)

            # Stage 3: Service document
            if self.check_service_document:
                logger.info("Stage 3: Checking ROLIE service document")
                self.reconciler.check(metadata.feeds)
                metrics.service_checked = True
            else:
                logger.info("Stage 3: ROLIE service document check disabled")

            # Stage 4: TLS
            logger.info("Stage 4: Reporting non-HTTPS URLs")
            self._report_tls()

            # Stage 5: Finalize metrics and reporting
            logger.info("Stage 5: Generating report")
            self._finalize_metrics(metrics, result)
            report = self.reporter.generate_report(metrics, self.issues)
            if self.save_reports:
                self.report_path = self.reporter.save_report(report, self.output_dir)

            duration = (metrics.completed_at - metrics.started_at).total_seconds()
            logger.info("=== Check Complete ===")
            logger.info(f"Duration: {duration:.1f}s")
            logger.info(f"Feeds: {metrics.feeds_fetched}/{metrics.feeds_total}")
            logger.info(f"Advisories: {metrics.advisories_total}")
            logger.info(f"Errors: {metrics.errors}")
            if self.report_path:
                logger.info(f"Report: {self.report_path}")

        except Exception as e:
            logger.error(f"Check run failed: {e}", exc_info=True)
            raise RuntimeError(f"Check run failed: {e}") from e

        return metrics

    def _load_provider_metadata(self) -> ProviderMetadata:
        """
        Fetch and parse the provider metadata.

        Every failure here is fatal for the run: without the metadata there
        are no feeds to check.
        """
        sink = self.issues.provider_metadata
        sink.use()
        self.client.check_tls(self.pmd_url)

        try:
            response = self.client.get(self.pmd_url)
        except requests.RequestException as exc:
            sink.error(f"Cannot fetch provider metadata {self.pmd_url}: {exc}")
            raise

        if response.status_code != requests.codes.ok:
            sink.error(
                f"Fetching {self.pmd_url} failed. Status code {response.status_code} ({response.reason})"
            )
            raise RuntimeError(f"Provider metadata not available: HTTP {response.status_code}")

        try:
            metadata = ProviderMetadata.from_dict(response.json())
        except ValueError as exc:
            sink.error(f"Loading provider metadata {self.pmd_url} failed: {exc}.")
            raise

        self._check_canonical_url(metadata.canonical_url)

        if not metadata.feeds:
            sink.warn("The provider metadata does not declare any ROLIE feeds.")

        logger.info(f"  Found {len(metadata.feed_urls())} ROLIE feeds")
        return metadata

    def _check_canonical_url(self, canonical_url: Optional[str]):
        """The provider metadata must name the URL it is served from."""
        sink = self.issues.provider_metadata
        if not canonical_url:
            sink.warn("The provider metadata does not declare a canonical_url.")
            return

        try:
            canonical = resolve_url(self.pmd_url, canonical_url)
        except InvalidURL as exc:
            sink.error(f"Invalid canonical_url {canonical_url} in provider metadata: {exc}.")
            return

        if canonical != resolve_url(self.pmd_url, self.pmd_url):
            sink.error(
                f"The canonical_url {canonical_url} of the provider metadata "
                f"does not match {self.pmd_url}."
            )

    def _report_tls(self):
        sink = self.issues.tls
        sink.use()
        if self.client.non_tls_urls:
            sink.error(f"Following non-HTTPS URLs were used: {sorted(self.client.non_tls_urls)}")

    def _finalize_metrics(self, metrics: ScanMetrics, result: FeedScanResult):
        """
        Copy engine results and message counts into the metrics.

        Args:
            metrics: ScanMetrics to update
            result: Outcome of the feed compliance engine
        """
        metrics.feeds_total = result.feeds_total
        metrics.feeds_fetched = len(result.fetched)
        metrics.advisories_total = len(result.inventory)
        metrics.label_counts = result.inventory.counts()
        metrics.summarized_labels = [
            label.value for label in ALL_LABELS if label in result.summarized
        ]
        metrics.record_issues(self.issues)
        metrics.completed_at = datetime.now(timezone.utc)


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Check the ROLIE feeds of a CSAF provider"
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        checker = FeedChecker(config_path=args.config)
        metrics = checker.run()

        # Print summary
        print("\n" + "=" * 60)
        print("Check Summary")
        print("=" * 60)
        print(f"Run ID: {metrics.run_id}")
        print(f"Provider: {metrics.provider_metadata_url}")
        print(f"Feeds: {metrics.feeds_fetched}/{metrics.feeds_total}")
        print(f"Advisories: {metrics.advisories_total}")
        print(f"Errors: {metrics.messages['error']}")
        print(f"Warnings: {metrics.messages['warn']}")
        print("\nAdvisories per TLP label:")
        for label, count in metrics.label_counts.items():
            print(f"  TLP:{label:12} {count:4}")
        if checker.report_path:
            print(f"\nReport: {checker.report_path}")
        print("=" * 60)

        sys.exit(1 if checker.issues.has_errors() else 0)

    except Exception as e:
        logger.error(f"Check failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
