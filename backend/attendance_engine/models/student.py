# File: backend/attendance_engine/models/student.py
"""Directory tables: students and class enrollments.

Owned by the student information system. The engine only reads them;
they are filled by the ``import-enrollments`` command.
"""
from attendance_engine import db
from attendance_engine.models.base import BaseModel

class Student(BaseModel):
    """Student display attributes."""
    
    __tablename__ = 'students'
    
    student_id = db.Column(db.String(50), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    index_no = db.Column(db.String(50), nullable=True, index=True)  # e.g. CS/2021/001
    email = db.Column(db.String(255), nullable=True)
    
    @property
    def name(self) -> str:
        parts = [self.first_name or '', self.last_name or '']
        name = ' '.join(part for part in parts if part).strip()
        return name if name else self.student_id
    
    def __repr__(self) -> str:
        return f'<Student {self.student_id}>'

class Enrollment(BaseModel):
    """Membership of a student in a class."""
    
    __tablename__ = 'enrollments'
    __table_args__ = (
        db.UniqueConstraint('class_id', 'student_id', name='uq_enrollment_class_student'),
    )
    
    class_id = db.Column(db.String(50), nullable=False, index=True)
    student_id = db.Column(db.String(50), nullable=False, index=True)
    
    def __repr__(self) -> str:
        return f'<Enrollment {self.class_id}:{self.student_id}>'
