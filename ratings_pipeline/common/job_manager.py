"""
Job Manager

Records each pipeline run in the job_log table so that failed and completed
runs can be audited after the fact. Job rows are written in autocommit mode on
their own pooled connection, so rolling back a run never erases its audit row.
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ratings_pipeline.common.db_utils import ConnectionPool

logger = logging.getLogger(__name__)


class JobStatus(Enum):
    """Job status enumeration."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class JobSummary:
    """Summary information for a pipeline job."""
    job_id: str
    job_type: str
    environment: str
    status: str
    iteration_name: Optional[str]
    records_processed: Optional[int]
    records_inserted: Optional[int]
    error_message: Optional[str]
    start_time: Optional[str]
    end_time: Optional[str]

    @property
    def is_successful(self) -> bool:
        """Check if job completed successfully."""
        return self.status == JobStatus.COMPLETED.value


class JobManager:
    """Creates and updates job_log rows for one environment."""

    def __init__(self, pool: ConnectionPool, environment: str = 'production'):
        self.pool = pool
        self.environment = environment

    def start_job(self, job_type: str, iteration_name: Optional[str] = None,
                  metadata: Optional[Dict[str, Any]] = None) -> str:
        """
        Start a new job and return its id.

        Args:
            job_type: Kind of job, e.g. 'ratings_update'
            iteration_name: Iteration the job works on, if known
            metadata: Extra details stored as JSON

        Returns:
            Job id string
        """
        job_id = f"{job_type}_{self.environment}_{int(time.time())}_{uuid.uuid4().hex[:8]}"

        with self.pool.connection() as conn:
            conn.execute('''
                INSERT INTO job_log (job_id, job_type, environment, status,
                                     iteration_name, metadata)
                VALUES (?, ?, ?, ?, ?, ?)
            ''', (job_id, job_type, self.environment, JobStatus.RUNNING.value,
                  iteration_name, json.dumps(metadata) if metadata else None))

        logger.info(f"Started job: {job_id}")
        return job_id

    def update_job(self, job_id: str, status: JobStatus,
                   records_processed: Optional[int] = None,
                   records_inserted: Optional[int] = None,
                   error_message: Optional[str] = None):
        """Update job status and counters."""
        update_parts = ['status = ?']
        params: List[Any] = [status.value]

        if records_processed is not None:
            update_parts.append('records_processed = ?')
            params.append(records_processed)

        if records_inserted is not None:
            update_parts.append('records_inserted = ?')
            params.append(records_inserted)

        if error_message:
            update_parts.append('error_message = ?')
            params.append(error_message)

        if status in (JobStatus.COMPLETED, JobStatus.FAILED):
            update_parts.append('end_time = CURRENT_TIMESTAMP')

        params.append(job_id)

        with self.pool.connection() as conn:
            conn.execute(f"UPDATE job_log SET {', '.join(update_parts)} WHERE job_id = ?", params)

        logger.info(f"Job {job_id} marked {status.value}")

    def get_job(self, job_id: str) -> Optional[JobSummary]:
        """Fetch one job row, or None if it does not exist."""
        with self.pool.connection() as conn:
            row = conn.execute('''
                SELECT job_id, job_type, environment, status, iteration_name,
                       records_processed, records_inserted, error_message,
                       start_time, end_time
                FROM job_log
                WHERE job_id = ?
            ''', (job_id,)).fetchone()

        if row is None:
            return None
        return JobSummary(**dict(row))
