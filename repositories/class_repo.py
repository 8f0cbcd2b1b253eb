from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.classes import ClassStudent as ClassStudentModel
from models.classes import SchoolClass as ClassModel


class ClassRepository:
    def __init__(self, db: Session):
        self.db = db

    def list(self, status: Optional[str] = None) -> List[ClassModel]:
        q = self.db.query(ClassModel)
        if status:
            q = q.filter(ClassModel.status == status)
        return q.order_by(ClassModel.id).all()

    def get(self, class_id: str) -> Optional[ClassModel]:
        return self.db.query(ClassModel).filter(ClassModel.id == class_id).first()

    def ids(self) -> List[str]:
        return [row[0] for row in self.db.query(ClassModel.id).all()]

    def add(self, school_class: ClassModel) -> ClassModel:
        self.db.add(school_class)
        return school_class

    def delete(self, school_class: ClassModel) -> None:
        self.db.delete(school_class)

    # ==========================================================
    # [membership]
    # ==========================================================
    def memberships(self, class_id: str) -> List[ClassStudentModel]:
        return (
            self.db.query(ClassStudentModel)
            .filter(ClassStudentModel.class_id == class_id)
            .order_by(ClassStudentModel.student_id)
            .all()
        )

    def membership(self, class_id: str, student_id: str) -> Optional[ClassStudentModel]:
        return (
            self.db.query(ClassStudentModel)
            .filter(ClassStudentModel.class_id == class_id, ClassStudentModel.student_id == student_id)
            .first()
        )

    def add_membership(self, class_id: str, student_id: str) -> ClassStudentModel:
        row = ClassStudentModel(class_id=class_id, student_id=student_id, status="enrolled")
        self.db.add(row)
        return row

    def remove_membership(self, row: ClassStudentModel) -> None:
        self.db.delete(row)

    def enrollment_counts(self) -> dict:
        """class_id -> number of enrolled students"""
        rows = (
            self.db.query(ClassStudentModel.class_id, func.count(ClassStudentModel.id))
            .filter(ClassStudentModel.status == "enrolled")
            .group_by(ClassStudentModel.class_id)
            .all()
        )
        return {class_id: count for class_id, count in rows}
