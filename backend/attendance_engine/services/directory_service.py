# backend/attendance_engine/services/directory_service.py
"""Read-only view of the enrollment directory."""
from typing import Dict, Iterable, Set
from attendance_engine import db
from attendance_engine.models.student import Student, Enrollment

class EnrollmentDirectory:
    """Directory lookups used by the engine. Never writes."""

    @staticmethod
    def get_enrolled_students(class_id: str) -> Set[str]:
        """Return the set of student IDs enrolled in a class."""
        rows = db.session.execute(
            db.select(Enrollment.student_id).where(Enrollment.class_id == class_id)
        ).scalars()
        return set(rows)

    @staticmethod
    def count_enrolled(class_id: str) -> int:
        """Count distinct enrolled students without loading them."""
        return db.session.execute(
            db.select(db.func.count(db.distinct(Enrollment.student_id)))
            .where(Enrollment.class_id == class_id)
        ).scalar_one()

    @staticmethod
    def is_enrolled(class_id: str, student_id: str) -> bool:
        """Check a single enrollment."""
        return db.session.execute(
            db.select(Enrollment.id).where(
                Enrollment.class_id == class_id,
                Enrollment.student_id == student_id
            ).limit(1)
        ).first() is not None

    @staticmethod
    def student_exists(student_id: str) -> bool:
        """Check the student is known to the directory."""
        return db.session.execute(
            db.select(Student.id).where(Student.student_id == student_id).limit(1)
        ).first() is not None

    @staticmethod
    def get_student_display_info(student_id: str) -> Dict:
        """Name and index number for roster rendering."""
        return EnrollmentDirectory.get_display_info_bulk([student_id])[student_id]

    @staticmethod
    def get_display_info_bulk(student_ids: Iterable[str]) -> Dict[str, Dict]:
        """Display info keyed by student ID; unknown students fall back to their ID."""
        ids = set(student_ids)
        info = {
            student_id: {'name': student_id, 'index_no': None, 'email': None}
            for student_id in ids
        }
        if not ids:
            return info

        students = db.session.execute(
            db.select(Student).where(Student.student_id.in_(ids))
        ).scalars()
        for student in students:
            info[student.student_id] = {
                'name': student.name,
                'index_no': student.index_no,
                'email': student.email
            }
        return info
