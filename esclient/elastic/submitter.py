"""Sequential submission of bulk batches.

Batches are sent one at a time and in order: batch `i + 1` is only sent once the
endpoint accepted batch `i`. The first failure stops the submission. Every
submission ends with exactly one `Outcome`.
"""

import logging
from typing import Sequence

from httpx import HTTPError, InvalidURL, Response

from esclient.elastic.protocol import (
    Batch,
    Outcome,
    OutcomeCallback,
    SubmissionPhase,
)
from esclient.elastic.transport import HttpTransport
from esclient.elastic.utils import build_bulk_body
from esclient.exceptions import EndpointError, SubmissionStateError

logger = logging.getLogger(__name__)

BULK_HEADERS: dict[str, str] = {"Content-Type": "application/x-ndjson"}


class BatchSubmission:
    """State of one bulk submission: `IDLE`, then `AWAITING_BATCH` at a given
    position, then `DONE` with its outcome.
    """

    index_name: str
    batches: tuple[Batch, ...]
    phase: SubmissionPhase
    position: int
    outcome: Outcome | None

    def __init__(self, index_name: str, batches: Sequence[Batch]):
        self.index_name = index_name
        self.batches = tuple(batches)
        self.phase = SubmissionPhase.IDLE
        self.position = 0
        self.outcome = None

    def start(self) -> Batch | None:
        """Begin the submission and return the first batch to send.

        An empty submission is done right away and counts as a success.
        """
        if self.phase is not SubmissionPhase.IDLE:
            raise SubmissionStateError(f"Cannot start a submission in phase {self.phase.value}")
        if not self.batches:
            self._finish(Outcome.ok())
            return None
        self.phase = SubmissionPhase.AWAITING_BATCH
        return self.batches[0]

    def complete(self, error: Exception | None = None) -> Batch | None:
        """Record the result of the in-flight batch.

        Returns the next batch to send, or None once the submission is done.
        """
        if self.phase is not SubmissionPhase.AWAITING_BATCH:
            raise SubmissionStateError(f"No batch in flight in phase {self.phase.value}")
        if error is not None:
            self._finish(Outcome.failure(error, batches_succeeded=self.position))
            return None

        self.position += 1
        if self.position == len(self.batches):
            self._finish(Outcome.ok(batches_succeeded=self.position))
            return None
        return self.batches[self.position]

    def _finish(self, outcome: Outcome) -> None:
        self.phase = SubmissionPhase.DONE
        self.outcome = outcome


class BatchSubmitter:
    """Send batches to the bulk endpoint of an index, one request per batch."""

    transport: HttpTransport

    def __init__(self, transport: HttpTransport):
        self.transport = transport

    def submit(self, index_name: str, batches: Sequence[Batch]) -> Outcome:
        """Submit every batch, blocking for each response before sending the next."""
        submission = BatchSubmission(index_name, batches)
        batch = submission.start()
        while batch is not None:
            self._log_batch(submission, batch)
            try:
                response = self.transport.request(
                    "POST", self._path(index_name), build_bulk_body(batch), BULK_HEADERS
                )
            except (HTTPError, InvalidURL) as ex:
                batch = submission.complete(ex)
            else:
                batch = submission.complete(self._check(response))
        return self._report(submission)

    async def submit_async(
        self,
        index_name: str,
        batches: Sequence[Batch],
        callback: OutcomeCallback | None = None,
    ) -> Outcome:
        """Submit every batch, awaiting each response before sending the next.

        `callback` is invoked once with the final outcome, after the last batch
        succeeded or the first one failed.
        """
        submission = BatchSubmission(index_name, batches)
        batch = submission.start()
        while batch is not None:
            self._log_batch(submission, batch)
            try:
                response = await self.transport.arequest(
                    "POST", self._path(index_name), build_bulk_body(batch), BULK_HEADERS
                )
            except (HTTPError, InvalidURL) as ex:
                batch = submission.complete(ex)
            else:
                batch = submission.complete(self._check(response))

        outcome = self._report(submission)
        if callback is not None:
            callback(outcome)
        return outcome

    @staticmethod
    def _path(index_name: str) -> str:
        return f"/{index_name}/_bulk"

    @staticmethod
    def _check(response: Response) -> EndpointError | None:
        if response.is_success:
            return None
        return EndpointError(response.status_code, response.reason_phrase)

    @staticmethod
    def _log_batch(submission: BatchSubmission, batch: Batch) -> None:
        logger.debug(
            "Submitting bulk batch",
            extra={
                "index": submission.index_name,
                "batch": submission.position + 1,
                "total_batches": len(submission.batches),
                "documents": len(batch),
            },
        )

    @staticmethod
    def _report(submission: BatchSubmission) -> Outcome:
        outcome = submission.outcome
        if outcome is None:
            raise SubmissionStateError("Submission ended without an outcome")
        if outcome.success:
            logger.info(
                "Completed bulk indexing",
                extra={"index": submission.index_name, "batches": outcome.batches_succeeded},
            )
        else:
            logger.warning(
                f"Bulk indexing failed: {outcome.error}",
                extra={
                    "index": submission.index_name,
                    "batches_succeeded": outcome.batches_succeeded,
                    "total_batches": len(submission.batches),
                },
            )
        return outcome
