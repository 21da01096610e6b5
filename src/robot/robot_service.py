"""
Delivery orchestrator: fetch, select, deliver and finalize runs.
"""

import threading
import time
from datetime import datetime
from typing import Any, Callable, ContextManager, Dict, List, Optional
from uuid import uuid4
from zoneinfo import ZoneInfo

from src.core.models.delivery_record import DeliveryRecord
from src.core.models.enums import DeliveryStatus, RobotPhase
from src.core.models.message_target import MessageTarget
from src.core.models.product import Product
from src.core.models.run_result import RunResult
from src.core.utils.message_renderer import product_variables
from src.enrichment.listing_enricher import ListingEnricher
from src.robot.robot_state import RobotState
from src.robot.template_resolver import resolve_template
from src.scrapers.source_fetcher import SourceFetcher
from src.shared.config.app_settings import get_app_config
from src.shared.config.robot_settings import RobotConfig, get_robot_config
from src.shared.logging.log_setup import get_logger, log_run_progress

logger = get_logger(__name__)


class RunStopped(Exception):
    """Raised at a checkpoint after a stop request."""


class AffiliateRobot:
    """
    Runs the affiliate pipeline end to end.
    
    Collaborators are injected: ``store_factory`` is a context manager
    factory yielding a bundle with ``products``, ``targets``, ``templates``
    and ``deliveries`` repositories; ``transport`` offers
    ``send_with_retry(number, text, image_url)``.
    """
    
    def __init__(
        self,
        fetcher: SourceFetcher,
        enricher: ListingEnricher,
        transport,
        store_factory: Callable[[], ContextManager],
        config: Optional[RobotConfig] = None,
        state: Optional[RobotState] = None,
        clock: Optional[Callable[[], datetime]] = None,
        send_images: bool = True,
    ):
        self.fetcher = fetcher
        self.enricher = enricher
        self.transport = transport
        self.store_factory = store_factory
        self.config = config or get_robot_config()
        self.state = state or RobotState(self.config.ROBOT_HISTORY_SIZE)
        self.send_images = send_images
        if clock is None:
            zone = ZoneInfo(get_app_config().TIMEZONE)
            clock = lambda: datetime.now(zone)
        self.clock = clock
        self._worker: Optional[threading.Thread] = None
    
    # lifecycle
    
    def _new_result(
        self,
        categories: Optional[List[str]],
        platforms: Optional[List[str]],
        limit: Optional[int],
    ) -> RunResult:
        return RunResult(
            execution_id=uuid4().hex[:12],
            started_at=self.clock(),
            options={
                "categories": list(categories or self.config.ROBOT_CATEGORIES),
                "platforms": list(platforms or self.config.ROBOT_PLATFORMS),
                "limit": limit or self.config.ROBOT_SCRAPING_LIMIT,
            },
        )
    
    def run(
        self,
        categories: Optional[List[str]] = None,
        platforms: Optional[List[str]] = None,
        limit: Optional[int] = None,
    ) -> RunResult:
        """
        Execute one run synchronously.
        
        Args:
            categories: Categories to fetch, configured defaults otherwise
            platforms: Platforms to fetch, configured defaults otherwise
            limit: Listings per category/platform pair
            
        Returns:
            Result of the run, partial counts included on failure
            
        Raises:
            RobotAlreadyRunningError: If a run is already active
        """
        result = self._new_result(categories, platforms, limit)
        self.state.begin(result)
        return self._execute(result)
    
    def start_in_background(
        self,
        categories: Optional[List[str]] = None,
        platforms: Optional[List[str]] = None,
        limit: Optional[int] = None,
    ) -> RunResult:
        """
        Start a run on a worker thread.
        
        The running guard is taken before returning, so a concurrent start
        is rejected synchronously.
        
        Returns:
            The live result of the started run
            
        Raises:
            RobotAlreadyRunningError: If a run is already active
        """
        result = self._new_result(categories, platforms, limit)
        self.state.begin(result)
        self._worker = threading.Thread(
            target=self._execute, args=(result,), name=f"robot-{result.execution_id}", daemon=True
        )
        self._worker.start()
        return result
    
    def stop(self, grace: Optional[float] = None) -> bool:
        """
        Ask the active run to end at its next checkpoint.
        
        Args:
            grace: Seconds to wait for the run to wind down
            
        Returns:
            True if the run ended through the stop request, or is still
            winding down when the grace period runs out; False if no run was
            active or it finished on its own
        """
        current = self.state.current_execution
        if not self.state.is_running or current is None:
            return False
        self.state.stop_event.set()
        grace = self.config.ROBOT_STOP_GRACE if grace is None else grace
        finished = self.state.idle_event.wait(grace)
        logger.info(
            "robot_stop_requested",
            execution_id=current.execution_id,
            stopped_within_grace=finished,
            interrupted=current.stopped if finished else None,
        )
        return current.stopped if finished else True
    
    def status(self) -> Dict[str, Any]:
        return self.state.snapshot()
    
    # run
    
    def _checkpoint(self) -> None:
        if self.state.stop_event.is_set():
            raise RunStopped()
    
    def _pause(self, seconds: float) -> None:
        """Sleep that a stop request cuts short."""
        if seconds > 0 and self.state.stop_event.wait(seconds):
            raise RunStopped()
    
    def _enter_phase(self, result: RunResult, phase: RobotPhase) -> None:
        self._checkpoint()
        self.state.set_phase(phase)
        log_run_progress(logger, phase.value, result.execution_id)
    
    def _execute(self, result: RunResult) -> RunResult:
        started = time.monotonic()
        logger.info("run_started", execution_id=result.execution_id, **result.options)
        try:
            with self.store_factory() as store:
                self._enter_phase(result, RobotPhase.FETCHING)
                self._fetch(store, result)
                
                self._enter_phase(result, RobotPhase.SELECTING)
                products, targets = self._select(store, result)
                
                self._enter_phase(result, RobotPhase.DELIVERING)
                self._deliver(store, result, products, targets)
                
                self._enter_phase(result, RobotPhase.FINALIZING)
                self._finalize(store, result)
            result.success = True
        except RunStopped:
            result.stopped = True
            result.errors.append("Run stopped by request")
            logger.warning("run_stopped", execution_id=result.execution_id, phase=self.state.phase.value)
        except Exception as e:
            result.counts.errors += 1
            result.errors.append(f"Run failed in {self.state.phase.value}: {e}")
            logger.error(
                "run_failed",
                execution_id=result.execution_id,
                phase=self.state.phase.value,
                error=str(e),
                exc_info=True,
            )
        finally:
            result.finished_at = self.clock()
            result.duration_seconds = round(time.monotonic() - started, 3)
            self.state.finish(result)
        
        logger.info(
            "run_finished",
            execution_id=result.execution_id,
            success=result.success,
            stopped=result.stopped,
            duration_seconds=result.duration_seconds,
            **result.counts.model_dump(),
        )
        return result
    
    def _fetch(self, store, result: RunResult) -> None:
        options = result.options
        batch = self.fetcher.fetch_all(
            options["categories"],
            options["platforms"],
            options["limit"],
            should_stop=self.state.stop_event.is_set,
        )
        result.counts.scraped = len(batch.listings)
        for error in batch.errors:
            result.counts.errors += 1
            result.errors.append(f"Fetch {error}")
        self._checkpoint()
        
        enrichment = self.enricher.enrich(batch.listings)
        result.counts.rejected = enrichment.rejected
        
        report = store.products.bulk_upsert(enrichment.products)
        result.counts.created = report.created
        result.counts.updated = report.updated
        for outcome in report.outcomes:
            if outcome.status == "errored":
                result.counts.errors += 1
                result.errors.append(f"Save {outcome.platform}/{outcome.platform_id}: {outcome.error}")
        
        log_run_progress(
            logger,
            RobotPhase.FETCHING.value,
            result.execution_id,
            scraped=result.counts.scraped,
            rejected=result.counts.rejected,
            created=result.counts.created,
            updated=result.counts.updated,
        )
    
    def _select(self, store, result: RunResult):
        products = store.products.find_for_delivery(
            list(self.config.ROBOT_ALLOWED_QUALITIES), self.config.ROBOT_MAX_PRODUCTS
        )
        now = self.clock()
        targets = []
        for target in store.targets.find_sendable():
            eligible, reason = target.check_eligibility(now)
            if eligible:
                targets.append(target)
            else:
                logger.debug("target_not_eligible", target_id=target.id, reason=reason)
        
        result.counts.selected_products = len(products)
        result.counts.eligible_targets = len(targets)
        log_run_progress(
            logger,
            RobotPhase.SELECTING.value,
            result.execution_id,
            products=len(products),
            targets=len(targets),
        )
        return products, targets
    
    def _deliver(
        self,
        store,
        result: RunResult,
        products: List[Product],
        targets: List[MessageTarget],
    ) -> None:
        pairs = [(product, target) for product in products for target in targets]
        dispatched = False
        for index, (product, target) in enumerate(pairs, 1):
            self._checkpoint()
            try:
                dispatched = self._deliver_pair(store, result, product, target, pace=dispatched) or dispatched
            except RunStopped:
                raise
            except Exception as e:
                result.counts.errors += 1
                result.errors.append(f"Deliver product {product.id} to target {target.id}: {e}")
                logger.warning(
                    "delivery_failed",
                    product_id=product.id,
                    target_id=target.id,
                    error=str(e),
                )
            log_run_progress(logger, RobotPhase.DELIVERING.value, result.execution_id, current=index, total=len(pairs))
    
    def _deliver_pair(self, store, result: RunResult, product: Product, target: MessageTarget, pace: bool) -> bool:
        """
        Deliver one product to one target.
        
        Returns:
            True if the message was handed to the transport
        
        Raises:
            TemplateError: If no template applies or a required variable is missing
        """
        # counters may have moved since selection
        current = store.targets.find_by_id(target.id)
        if current is None:
            logger.info("target_gone", target_id=target.id)
            return False
        eligible, reason = current.check_eligibility(self.clock())
        if not eligible:
            logger.info("target_skipped", target_id=current.id, reason=reason)
            return False
        
        template = resolve_template(current, product, store.templates)
        content = template.render(product_variables(product))
        image_url = product.image_url if self.send_images else None
        
        if pace:
            self._pause(self.config.ROBOT_MESSAGE_DELAY)
        
        scheduled_at = self.clock()
        result.counts.sent += 1
        outcome = self.transport.send_with_retry(current.whatsapp_id, content, image_url)
        finished_at = self.clock()
        
        record = DeliveryRecord(
            product_id=product.id,
            target_id=current.id,
            template_id=template.id,
            content=content,
            image_url=image_url,
            message_id=outcome.message_id,
            api_success=outcome.success,
            api_response=outcome.response or None,
            error_message=outcome.error,
            http_status=outcome.http_status,
            attempts=outcome.attempts,
            processing_time_ms=outcome.processing_time_ms,
            execution_id=result.execution_id,
            scheduled_at=scheduled_at,
        )
        record.transition_to(DeliveryStatus.SENT if outcome.success else DeliveryStatus.FAILED, finished_at)
        store.deliveries.insert(record)
        
        if outcome.success:
            result.counts.succeeded += 1
            store.targets.record_message_sent(current.id, finished_at)
            if template.id is not None:
                store.templates.record_usage(template.id, finished_at)
        else:
            result.counts.errors += 1
            result.errors.append(
                f"Send product {product.id} to target {current.id} failed after "
                f"{outcome.attempts} attempts: {outcome.error}"
            )
        return True
    
    def _finalize(self, store, result: RunResult) -> None:
        today = self.clock().date()
        last = self.state.last_finalize_date
        if last is not None and today > last:
            store.targets.reset_daily_counters(today)
        self.state.last_finalize_date = today
        log_run_progress(logger, RobotPhase.FINALIZING.value, result.execution_id, date=today.isoformat())
