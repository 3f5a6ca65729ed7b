from jobboard.models.job import Job, JobTag
from jobboard.models.application import Application
from jobboard.models.saved_job import SavedJob

__all__ = ["Job", "JobTag", "Application", "SavedJob"]
