"""
Unit tests for the JobManager class.
"""

import tempfile
import unittest
from pathlib import Path

from ratings_pipeline.common.job_manager import JobManager, JobStatus
from ratings_pipeline.testing import build_test_database


class TestJobManager(unittest.TestCase):
    """Test cases for JobManager."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.pool = build_test_database(Path(self.temp_dir.name) / 'ratings.db')
        self.manager = JobManager(self.pool, environment='test')

    def tearDown(self):
        """Clean up test fixtures."""
        self.pool.close()
        self.temp_dir.cleanup()

    def test_start_job(self):
        """A new job is recorded as running."""
        job_id = self.manager.start_job('ratings_update', '12-week-12', metadata={'players': 3})

        self.assertTrue(job_id.startswith('ratings_update_test_'))
        job = self.manager.get_job(job_id)
        self.assertEqual(job.status, JobStatus.RUNNING.value)
        self.assertEqual(job.iteration_name, '12-week-12')
        self.assertIsNone(job.end_time)

    def test_complete_job(self):
        """Completing a job stores counters and an end time."""
        job_id = self.manager.start_job('ratings_update', '12-week-12')
        self.manager.update_job(job_id, JobStatus.COMPLETED,
                                records_processed=10, records_inserted=9)

        job = self.manager.get_job(job_id)
        self.assertTrue(job.is_successful)
        self.assertEqual(job.records_processed, 10)
        self.assertEqual(job.records_inserted, 9)
        self.assertIsNotNone(job.end_time)

    def test_fail_job(self):
        """Failing a job keeps the error message."""
        job_id = self.manager.start_job('development_traits_update', '12-week-12')
        self.manager.update_job(job_id, JobStatus.FAILED, error_message='Team not found: X')

        job = self.manager.get_job(job_id)
        self.assertFalse(job.is_successful)
        self.assertEqual(job.error_message, 'Team not found: X')

    def test_unknown_job(self):
        """Looking up a missing job returns None."""
        self.assertIsNone(self.manager.get_job('nope'))


if __name__ == '__main__':
    unittest.main()
