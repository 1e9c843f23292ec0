# backend/attendance_engine/services/enrollment_import_service.py
"""Load directory data (students and enrollments) from spreadsheets."""
from typing import Dict
from sqlalchemy.exc import SQLAlchemyError
from attendance_engine import db
from attendance_engine.models.student import Student, Enrollment
from attendance_engine.utils.validators import Validator
import pandas as pd

REQUIRED_COLUMNS = ['student_id']
OPTIONAL_COLUMNS = ['first_name', 'last_name', 'index_no', 'email']

class EnrollmentImportService:
    """Seeds the read-only directory tables the engine consults."""

    @staticmethod
    def read_file(path: str) -> pd.DataFrame:
        """Read a CSV or Excel sheet with every cell as text."""
        if path.lower().endswith(('.xlsx', '.xls')):
            df = pd.read_excel(path, dtype=str, keep_default_na=False)
        else:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)

        df.columns = [str(column).strip().lower() for column in df.columns]
        missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
        if missing:
            raise ValueError(f"Missing required column: {', '.join(missing)}")

        return df

    @staticmethod
    def import_dataframe(df: pd.DataFrame, class_id: str) -> Dict:
        """Upsert students and enroll them in the class."""
        class_id = Validator.validate_class_id(class_id)
        summary = {'rows': len(df), 'students_created': 0, 'enrollments_created': 0, 'errors': []}
        # Blank cells arrive as NaN or None depending on the pandas version
        df = df.astype(object).fillna('')
        enrolled = set(db.session.execute(
            db.select(Enrollment.student_id).where(Enrollment.class_id == class_id)
        ).scalars())

        for index, row in df.iterrows():
            student_id = str(row.get('student_id', '')).strip()
            if not student_id:
                summary['errors'].append({'row': index + 2, 'error': 'Missing student_id'})
                continue

            student = db.session.execute(
                db.select(Student).where(Student.student_id == student_id)
            ).scalar_one_or_none()
            if student is None:
                student = Student(student_id=student_id)
                db.session.add(student)
                summary['students_created'] += 1

            for column in OPTIONAL_COLUMNS:
                value = row.get(column)
                if isinstance(value, str) and value.strip():
                    setattr(student, column, value.strip())

            if student_id not in enrolled:
                db.session.add(Enrollment(class_id=class_id, student_id=student_id))
                enrolled.add(student_id)
                summary['enrollments_created'] += 1

        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise ValueError(f"Import failed: {e}")

        return summary

    @staticmethod
    def import_file(path: str, class_id: str) -> Dict:
        """Import a file for one class."""
        return EnrollmentImportService.import_dataframe(
            EnrollmentImportService.read_file(path), class_id
        )
