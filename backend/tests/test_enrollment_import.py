"""Enrollment import tests."""
import pandas as pd
import pytest
from attendance_engine.models.student import Student
from attendance_engine.services.directory_service import EnrollmentDirectory
from attendance_engine.services.enrollment_import_service import EnrollmentImportService

def _write_csv(tmp_path, text):
    path = tmp_path / 'enrollments.csv'
    path.write_text(text)
    return str(path)

def test_import_creates_students_and_enrollments(app, tmp_path):
    path = _write_csv(tmp_path, (
        "Student_ID,First_Name,Last_Name,Index_No\n"
        "S1,Grace,Hopper,MA/001\n"
        "S2,Alan,Turing,MA/002\n"
        ",Missing,Id,MA/003\n"
    ))
    
    summary = EnrollmentImportService.import_file(path, 'MA100')
    
    assert summary['rows'] == 3
    assert summary['students_created'] == 2
    assert summary['enrollments_created'] == 2
    assert summary['errors'] == [{'row': 4, 'error': 'Missing student_id'}]
    assert EnrollmentDirectory.get_enrolled_students('MA100') == {'S1', 'S2'}
    assert Student.query.filter_by(student_id='S1').one().name == 'Grace Hopper'

def test_blank_optional_cells_are_skipped(app, tmp_path):
    path = _write_csv(tmp_path, (
        "student_id,first_name,last_name,email\n"
        "S1,Grace,Hopper,grace@example.edu\n"
        "S2,Alan,,\n"
    ))

    summary = EnrollmentImportService.import_file(path, 'MA100')

    student = Student.query.filter_by(student_id='S2').one()
    assert summary['errors'] == []
    assert summary['students_created'] == 2
    assert student.email is None
    assert student.name == 'Alan'

def test_dataframe_with_missing_values(app):
    df = pd.DataFrame({'student_id': ['S1', 'S2'], 'email': ['a@example.edu', None]})

    summary = EnrollmentImportService.import_dataframe(df, 'MA100')

    assert summary['enrollments_created'] == 2
    assert Student.query.filter_by(student_id='S1').one().email == 'a@example.edu'
    assert Student.query.filter_by(student_id='S2').one().email is None

def test_reimport_is_idempotent(app, tmp_path):
    path = _write_csv(tmp_path, "student_id,index_no\nS1,MA/001\n")
    EnrollmentImportService.import_file(path, 'MA100')
    
    summary = EnrollmentImportService.import_file(path, 'MA100')
    
    assert summary['students_created'] == 0
    assert summary['enrollments_created'] == 0
    assert EnrollmentDirectory.count_enrolled('MA100') == 1

def test_existing_student_enrolled_in_second_class(enrolled_class, tmp_path):
    path = _write_csv(tmp_path, "student_id\nA\n")
    
    summary = EnrollmentImportService.import_file(path, 'MA100')
    
    assert summary['students_created'] == 0
    assert EnrollmentDirectory.is_enrolled('MA100', 'A')
    assert EnrollmentDirectory.is_enrolled(enrolled_class, 'A')

def test_missing_student_id_column(app, tmp_path):
    path = _write_csv(tmp_path, "name\nGrace\n")
    
    with pytest.raises(ValueError, match='student_id'):
        EnrollmentImportService.import_file(path, 'MA100')
