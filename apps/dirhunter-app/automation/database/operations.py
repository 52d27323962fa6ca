"""
Database operations for DirHunter.
One table:
1. submission_results - one row per submission attempt, in the order produced
"""

import json
from typing import List, Dict, Any, Optional
from datetime import datetime
from sqlalchemy import create_engine, Column, Integer, String, DateTime, Text, Boolean
from sqlalchemy.orm import sessionmaker, declarative_base
from loguru import logger

from models import SubmissionResult

Base = declarative_base()


class SubmissionRecord(Base):
    """Outcome of one submission attempt."""
    __tablename__ = 'submission_results'

    id = Column(Integer, primary_key=True)
    name = Column(String(500), nullable=False)
    url = Column(String(2000), nullable=False)
    success = Column(Boolean, default=False)
    requires_manual = Column(Boolean, default=False)
    state = Column(String(30), nullable=False)  # terminal state: success, failed, manual_required
    message = Column(Text)
    fields_filled = Column(Text)  # JSON array of canonical keys that were filled
    used_site_config = Column(Boolean, default=False)
    details = Column(Text)  # JSON: {"states": [...], "fieldsSkipped": [...]}
    screenshot = Column(String(2000))
    submitted_at = Column(DateTime, default=datetime.utcnow)


class DatabaseOperations:
    """Submission result store."""

    def __init__(self, db_url: str):
        self.engine = create_engine(db_url, echo=False)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine)
        logger.debug(f"Database initialized: {db_url}")

    def _to_dict(self, r: SubmissionRecord) -> Dict[str, Any]:
        details = json.loads(r.details) if r.details else {}
        return {
            "id": r.id,
            "name": r.name,
            "url": r.url,
            "result": {
                "success": bool(r.success),
                "message": r.message or "",
                "requiresManual": bool(r.requires_manual),
                "usedSiteConfig": bool(r.used_site_config),
                "state": r.state,
                "states": details.get("states", []),
                "fieldsFilled": json.loads(r.fields_filled) if r.fields_filled else [],
                "fieldsSkipped": details.get("fieldsSkipped", []),
                "screenshot": r.screenshot,
            },
            "timestamp": r.submitted_at.isoformat() + "Z" if r.submitted_at else None,
        }

    def add_result(self, name: str, url: str, result: SubmissionResult) -> int:
        """Add a submission result."""
        session = self.Session()
        try:
            details = {
                "states": [s.value for s in result.states],
                "fieldsSkipped": list(result.fields_skipped),
            }
            record = SubmissionRecord(
                name=name,
                url=url,
                success=result.success,
                requires_manual=result.requires_manual,
                state=result.state.value,
                message=result.message,
                fields_filled=json.dumps(result.fields_filled),
                used_site_config=result.used_site_config,
                details=json.dumps(details),
                screenshot=result.screenshot,
            )
            session.add(record)
            session.commit()
            return record.id
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_results(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Get submission results in insertion order."""
        session = self.Session()
        try:
            query = session.query(SubmissionRecord).order_by(SubmissionRecord.id.asc())
            if limit:
                query = query.limit(limit)
            return [self._to_dict(r) for r in query.all()]
        finally:
            session.close()

    def get_result_stats(self) -> Dict[str, int]:
        """Get submission statistics."""
        session = self.Session()
        try:
            total = session.query(SubmissionRecord).count()
            successful = session.query(SubmissionRecord).filter(SubmissionRecord.success.is_(True)).count()
            manual = session.query(SubmissionRecord).filter(SubmissionRecord.requires_manual.is_(True)).count()
            failed = session.query(SubmissionRecord).filter(SubmissionRecord.state == 'failed').count()

            return {
                "total": total,
                "successful": successful,
                "failed": failed,
                "manual": manual
            }
        finally:
            session.close()

    def get_latest_result(self, name: str) -> Optional[Dict[str, Any]]:
        """Most recent result for a directory, or None."""
        session = self.Session()
        try:
            record = session.query(SubmissionRecord).filter(
                SubmissionRecord.name == name
            ).order_by(SubmissionRecord.id.desc()).first()
            return self._to_dict(record) if record else None
        finally:
            session.close()

    def export_json(self, path: str) -> int:
        """Write all results as [{name, url, result, timestamp}]. Returns the count."""
        results = self.get_results()
        exported = [
            {"name": r["name"], "url": r["url"], "result": r["result"], "timestamp": r["timestamp"]}
            for r in results
        ]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(exported, f, indent=2, ensure_ascii=False)
        return len(exported)

    def clear_results(self):
        """Clear all submission results."""
        session = self.Session()
        try:
            session.query(SubmissionRecord).delete()
            session.commit()
        finally:
            session.close()
