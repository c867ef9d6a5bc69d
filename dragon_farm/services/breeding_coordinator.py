"""Breeding request lifecycle.

Queued -> Validating -> Breeding -> Completed | Failed(reason)

- The coordinator is the only code that creates or transitions breeding requests.
- Every transition is a compare-and-set on the stored status, so a request
  that was cancelled (or picked up elsewhere) in the meantime is left alone.
- Parents are reserved from the moment a request enters Validating until it
  reaches a terminal status. Reservations are released on every exit path.
- A request found in Validating or Breeding that no local task is running
  (left behind by a crash or a failed status write) is failed with
  InternalError by fail_stalled_requests().
"""

import asyncio
import logging
import secrets
from datetime import datetime
from typing import Callable, List, Optional, Set
from uuid import UUID

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from uuid6 import uuid7

from dragon_farm.domain.breeding_rules import (
    BreedingStatus,
    DragonSex,
    FailureReason,
    check_parent_sexes,
    is_cancellable,
)
from dragon_farm.domain.errors import (
    BreedingRequestNotFoundError,
    BreedingValidationError,
    DataIntegrityError,
    DragonNotFoundError,
    InvalidTransitionError,
    PersistenceError,
    RequestNotCancellableError,
)
from dragon_farm.domain.genetics import BreedingEngine
from dragon_farm.domain.genotype import Genotype
from dragon_farm.models.dc_models import BreedingRequestModel
from dragon_farm.models.schema_models import BreedingRequestSchema, DragonSchema
from dragon_farm.parent_reservation_manager import ParentReservationManager
from dragon_farm.services.farm_db import FarmDB
from dragon_farm.services.genotype_store import GenotypeStore

DEFAULT_COMMIT_ATTEMPTS = 3


class BreedingCoordinator:
    def __init__(
        self,
        genotype_store: GenotypeStore,
        farm_db: FarmDB,
        engine: BreedingEngine,
        reservations: Optional[ParentReservationManager] = None,
        commit_attempts: int = DEFAULT_COMMIT_ATTEMPTS,
        commit_wait_multiplier: float = 0.1,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if commit_attempts < 1:
            raise ValueError("commit_attempts must be >= 1")
        self.genotype_store = genotype_store
        self.farm_db = farm_db
        self.engine = engine
        self.reservations = reservations or ParentReservationManager()
        self.commit_attempts = commit_attempts
        self.commit_wait_multiplier = commit_wait_multiplier
        self.clock = clock
        self._active: Set[UUID] = set()

    @property
    def registry(self):
        return self.genotype_store.registry

    @property
    def scorer(self):
        return self.genotype_store.scorer

    # ==== Submission boundary =================================================

    async def submit(self, breeding_request: BreedingRequestModel) -> BreedingRequestSchema:
        """Queue a new breeding request

        Args:
            breeding_request (BreedingRequestModel): Parent ids, optional seed and offspring name

        Returns:
            BreedingRequestSchema: The stored request in Queued status
        """
        rng_seed = breeding_request.rng_seed
        if rng_seed is None:
            rng_seed = secrets.randbits(63)

        request = BreedingRequestSchema(
            request_id=uuid7(),
            parent_a_id=breeding_request.parent_a_id,
            parent_b_id=breeding_request.parent_b_id,
            requested_at=self.clock(),
            status=BreedingStatus.queued,
            offspring_name=breeding_request.offspring_name,
            rng_seed=rng_seed,
        )
        await self.farm_db.create_breeding_request(request)
        logging.info(
            f"Queued breeding request {request.request_id} "
            f"({request.parent_a_id} x {request.parent_b_id}, seed={rng_seed})"
        )
        return request

    async def get_request(self, request_id: UUID) -> BreedingRequestSchema:
        request = await self.farm_db.read_breeding_request(request_id)
        if request is None:
            raise BreedingRequestNotFoundError(request_id)
        return request

    async def cancel(self, request_id: UUID) -> BreedingRequestSchema:
        """Cancel a request that has not been picked up yet

        Args:
            request_id (UUID): To identify the request

        Raises:
            BreedingRequestNotFoundError: The request does not exist
            RequestNotCancellableError: The request already left Queued

        Returns:
            BreedingRequestSchema: The request in Failed(Cancelled)
        """
        request = await self.get_request(request_id)
        if not is_cancellable(request.status):
            raise RequestNotCancellableError(request_id, request.status.value)

        cancelled = await self.farm_db.transition_breeding_request(
            request_id,
            BreedingStatus.queued,
            BreedingStatus.failed,
            failure_reason=FailureReason.cancelled,
            completed_at=self.clock(),
        )
        if cancelled is None:
            # Picked up by a worker between the read and the write.
            request = await self.get_request(request_id)
            raise RequestNotCancellableError(request_id, request.status.value)

        logging.info(f"Cancelled breeding request {request_id}")
        return cancelled

    # ==== Processing ==========================================================

    async def process(self, request_id: UUID) -> BreedingRequestSchema:
        """Run a single request to a terminal status

        Args:
            request_id (UUID): To identify the request

        Returns:
            BreedingRequestSchema: The request after processing
        """
        request = await self.get_request(request_id)
        if request.status != BreedingStatus.queued:
            return request
        result = await self._run(request)
        return result if result is not None else await self.get_request(request_id)

    async def process_queued(self) -> List[BreedingRequestSchema]:
        """Dequeue every Queued request and process them concurrently

        Requests are started oldest first. A parent shared by two of them is
        reserved by the older one, and the younger one fails with ParentBusy.

        Returns:
            List[BreedingRequestSchema]: Requests that were processed by this call
        """
        await self.fail_stalled_requests()
        queued = await self.farm_db.read_queued_breeding_requests()
        if not queued:
            return []

        logging.info(f"Processing {len(queued)} queued breeding request(s)")
        results = await asyncio.gather(*(self._run(request) for request in queued), return_exceptions=True)

        processed = []
        for request, result in zip(queued, results):
            if isinstance(result, Exception):
                logging.error(f"Breeding request {request.request_id} did not finish: {result!r}")
            elif result is not None:
                processed.append(result)
        return processed

    async def fail_stalled_requests(self) -> List[BreedingRequestSchema]:
        """Fail in-flight requests that no task of this coordinator is running

        Reservations live in process memory, so such a request can never
        resume: it was interrupted by a restart or its terminal write failed.

        Returns:
            List[BreedingRequestSchema]: Requests moved to Failed(InternalError)
        """
        stalled = [
            request
            for request in await self.farm_db.read_in_flight_breeding_requests()
            if request.request_id not in self._active
        ]
        failed = []
        for request in stalled:
            logging.warning(f"Breeding request {request.request_id} is stuck in {request.status.value}")
            result = await self._fail(request.request_id, request.status, FailureReason.internal_error)
            if result is not None:
                failed.append(result)
        return failed

    async def _run(self, request: BreedingRequestSchema) -> Optional[BreedingRequestSchema]:
        request_id = request.request_id
        if request_id in self._active:
            return None
        self._active.add(request_id)
        try:
            # Reserve before the first await that can suspend, so among requests
            # started together the oldest one wins a shared parent.
            reserved = await self.reservations.acquire(request_id, (request.parent_a_id, request.parent_b_id))
            try:
                return await self._validate_and_breed(request, reserved)
            finally:
                await self.reservations.release(request_id)
        finally:
            self._active.discard(request_id)

    async def _validate_and_breed(
        self, request: BreedingRequestSchema, reserved: bool
    ) -> Optional[BreedingRequestSchema]:
        request_id = request.request_id
        validating = await self.farm_db.transition_breeding_request(
            request_id, BreedingStatus.queued, BreedingStatus.validating
        )
        if validating is None:
            logging.info(f"Breeding request {request_id} is no longer queued; skipping")
            return None
        logging.info(f"Breeding request {request_id}: Queued -> Validating")

        try:
            await self._validate(validating, reserved)
            breeding = await self.farm_db.transition_breeding_request(
                request_id, BreedingStatus.validating, BreedingStatus.breeding
            )
        except BreedingValidationError as e:
            logging.warning(f"Breeding request {request_id} failed validation: {e.reason.value}")
            return await self._fail(request_id, BreedingStatus.validating, e.reason)
        except PersistenceError:
            logging.error(f"Breeding request {request_id} could not be validated")
            return await self._fail(request_id, BreedingStatus.validating, FailureReason.persistence_error)

        if breeding is None:
            logging.error(f"Breeding request {request_id} left Validating unexpectedly")
            return None
        logging.info(f"Breeding request {request_id}: Validating -> Breeding")

        return await self._breed(breeding)

    async def _validate(self, request: BreedingRequestSchema, reserved: bool) -> None:
        """Check the business rules, in reporting order

        Raises:
            BreedingValidationError: ParentNotFound, IncompatibleSex or ParentBusy
        """
        parent_a = await self.farm_db.read_dragon(request.parent_a_id)
        parent_b = await self.farm_db.read_dragon(request.parent_b_id)
        if parent_a is None or parent_b is None:
            raise BreedingValidationError(FailureReason.parent_not_found)

        check_parent_sexes(parent_a.sex, parent_b.sex)

        if not reserved:
            raise BreedingValidationError(FailureReason.parent_busy)

    async def _breed(self, request: BreedingRequestSchema) -> Optional[BreedingRequestSchema]:
        request_id = request.request_id
        try:
            genotype_a = await self.genotype_store.get(request.parent_a_id)
            genotype_b = await self.genotype_store.get(request.parent_b_id)
            genotype, sex = self.engine.breed_offspring(genotype_a, genotype_b, request.rng_seed)
            dragon = await self._commit_offspring(request, genotype, sex)
        except (DataIntegrityError, DragonNotFoundError):
            logging.exception(f"Breeding request {request_id} hit a data integrity error")
            return await self._fail(request_id, BreedingStatus.breeding, FailureReason.internal_error)
        except PersistenceError:
            logging.error(f"Breeding request {request_id} could not be stored")
            return await self._fail(request_id, BreedingStatus.breeding, FailureReason.persistence_error)
        except InvalidTransitionError:
            logging.error(f"Breeding request {request_id} left Breeding before the offspring was stored")
            return None

        logging.info(f"Breeding request {request_id}: Breeding -> Completed (offspring {dragon.dragon_id})")
        return request.model_copy(
            update={
                "status": BreedingStatus.completed,
                "offspring_dragon_id": dragon.dragon_id,
                "completed_at": dragon.hatched_at,
            }
        )

    async def _commit_offspring(
        self, request: BreedingRequestSchema, genotype: Genotype, sex: DragonSex
    ) -> DragonSchema:
        """Store the hatchling and complete the request, retrying transient failures.

        The caller still holds the parent reservations while this retries.
        """
        dragon_id = uuid7()
        name = request.offspring_name or f"Hatchling {dragon_id.hex[-8:]}"
        retryer = self._retrying(f"Commit for breeding request {request.request_id}")

        async def hatch() -> DragonSchema:
            return await self.genotype_store.hatch(
                name=name,
                sex=sex,
                genotype=genotype,
                hatched_at=self.clock(),
                dragon_id=dragon_id,
                completed_request_id=request.request_id,
            )

        return await retryer(hatch)

    def _retrying(self, action: str) -> AsyncRetrying:
        """Retry policy for status and offspring writes: PersistenceError only, exponential backoff."""

        def log_retry(retry_state: RetryCallState) -> None:
            logging.warning(f"{action} failed, attempt {retry_state.attempt_number}/{self.commit_attempts}")

        return AsyncRetrying(
            stop=stop_after_attempt(self.commit_attempts),
            wait=wait_exponential(multiplier=self.commit_wait_multiplier, max=2),
            retry=retry_if_exception_type(PersistenceError),
            before_sleep=log_retry,
            reraise=True,
        )

    async def _fail(
        self, request_id: UUID, expected_status: BreedingStatus, reason: FailureReason
    ) -> Optional[BreedingRequestSchema]:
        retryer = self._retrying(f"Failing breeding request {request_id}")
        failed = await retryer(
            self.farm_db.transition_breeding_request,
            request_id,
            expected_status,
            BreedingStatus.failed,
            failure_reason=reason,
            completed_at=self.clock(),
        )
        if failed is None:
            logging.error(f"Breeding request {request_id} left {expected_status.value} before it could fail")
        else:
            logging.info(f"Breeding request {request_id}: {expected_status.value} -> Failed({reason.value})")
        return failed
