from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from jobboard.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Text, primary_key=True)
    tenant_id = Column(Text, nullable=False)
    posted_by = Column(Text, nullable=False)
    posted_by_name = Column(Text)
    company = Column(Text, nullable=False)
    position = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    experience = Column(Text, nullable=False, default="mid")
    industry = Column(Text, nullable=False, default="technology")
    remote = Column(Boolean, nullable=False, default=False)
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    salary_currency = Column(Text)
    vacancies = Column(Integer)
    requirements = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=False)
    deadline = Column(Text)
    application_url = Column(Text)
    status = Column(Text, nullable=False, default="pending")
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    tags = relationship("JobTag", back_populates="job", cascade="all, delete-orphan")
    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan")

    @property
    def tag_names(self) -> list[str]:
        return [t.name for t in self.tags]


class JobTag(Base):
    __tablename__ = "job_tags"

    job_id = Column(Text, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True)
    name = Column(Text, primary_key=True)

    job = relationship("Job", back_populates="tags")
