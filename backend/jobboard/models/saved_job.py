from sqlalchemy import Column, ForeignKey, Text
from jobboard.database import Base


class SavedJob(Base):
    __tablename__ = "saved_jobs"

    user_id = Column(Text, primary_key=True)
    job_id = Column(Text, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True)
    saved_at = Column(Text, nullable=False)
