from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.students import Student as StudentModel


class StudentRepository:
    def __init__(self, db: Session):
        self.db = db

    def list(self, search: Optional[str] = None, grade: Optional[str] = None) -> List[StudentModel]:
        q = self.db.query(StudentModel)
        if search:
            like = f"%{search.strip()}%"
            q = q.filter(or_(
                StudentModel.first_name.ilike(like),
                StudentModel.last_name.ilike(like),
                StudentModel.id.ilike(like),
            ))
        if grade:
            q = q.filter(StudentModel.grade == grade)
        return q.order_by(StudentModel.last_name, StudentModel.first_name).all()

    def get(self, student_id: str) -> Optional[StudentModel]:
        return self.db.query(StudentModel).filter(StudentModel.id == student_id).first()

    def get_many(self, student_ids) -> List[StudentModel]:
        ids = list(student_ids)
        if not ids:
            return []
        return self.db.query(StudentModel).filter(StudentModel.id.in_(ids)).all()

    def ids(self) -> List[str]:
        return [row[0] for row in self.db.query(StudentModel.id).all()]

    def add(self, student: StudentModel) -> StudentModel:
        self.db.add(student)
        return student

    def delete(self, student: StudentModel) -> None:
        self.db.delete(student)
