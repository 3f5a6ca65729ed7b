from sqlalchemy import JSON, Column, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from jobboard.database import Base


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("job_id", "applicant_id"),)

    id = Column(Text, primary_key=True)
    job_id = Column(Text, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    applicant_id = Column(Text, nullable=False)
    tenant_id = Column(Text, nullable=False)
    # Contact snapshot as entered at submission, never joined to the live profile.
    contact_name = Column(Text, nullable=False)
    contact_email = Column(Text, nullable=False)
    contact_phone = Column(Text, nullable=False)
    skills = Column(JSON, nullable=False)
    experience = Column(Text, nullable=False)
    message = Column(Text)
    resume_ref = Column(Text)
    status = Column(Text, nullable=False, default="Applied")
    applied_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
    reviewed_by = Column(Text)
    reviewed_at = Column(Text)
    review_notes = Column(Text)

    job = relationship("Job", back_populates="applications")
