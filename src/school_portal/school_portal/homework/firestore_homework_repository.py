from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from google.cloud.firestore_v1.base_query import FieldFilter

from ..core.enums import HomeworkStatus, SubmissionStatus
from ..database.firestore_base import as_date, as_datetime, chunked, snapshot_to_dict, stream_dicts, unique
from .model import Homework, HomeworkSubmission
from .repository import HomeworkRepository, SubmissionRepository

COLLECTION = "homework"
SUBMISSIONS_COLLECTION = "homeworkSubmissions"


def homework_from_doc(d: dict) -> Homework:
    return Homework(
        homework_id=d["id"],
        title=d.get("title", ""),
        description=d.get("description", ""),
        class_id=d.get("classId", ""),
        due_date=as_date(d.get("dueDate")) or date.max,
        created_by=d.get("createdBy", ""),
        created_at=as_datetime(d.get("createdAt")) or datetime.min,
        status=HomeworkStatus(d.get("status") or HomeworkStatus.ACTIVE.value),
        class_name=d.get("className"),
        lesson_id=d.get("lessonId"),
        teacher_name=d.get("teacherName"),
        attachment_urls=tuple(d.get("attachmentUrls") or ()),
    )


def submission_from_doc(d: dict) -> HomeworkSubmission:
    grade = d.get("grade")
    return HomeworkSubmission(
        submission_id=d["id"],
        homework_id=d.get("homeworkId", ""),
        student_id=d.get("studentId", ""),
        student_name=d.get("studentName", ""),
        submitted_at=as_datetime(d.get("submittedAt")) or datetime.min,
        status=SubmissionStatus(d.get("status") or SubmissionStatus.SUBMITTED.value),
        submission_urls=tuple(d.get("submissionUrls") or ()),
        submission_text=d.get("submissionText"),
        grade=float(grade) if grade is not None else None,
        feedback=d.get("feedback"),
        graded_by=d.get("gradedBy"),
        graded_at=as_datetime(d.get("gradedAt")),
    )


class FirestoreHomeworkRepository(HomeworkRepository):
    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(COLLECTION)

    def get_by_id(self, homework_id: str) -> Optional[Homework]:
        d = snapshot_to_dict(self._col().document(homework_id).get())
        return homework_from_doc(d) if d else None

    def get_many(self, homework_ids: Sequence[str]) -> Sequence[Homework]:
        ids = unique(homework_ids)
        if not ids:
            return []
        snaps = self._db.get_all([self._col().document(hid) for hid in ids])
        return [homework_from_doc(d) for d in (snapshot_to_dict(s) for s in snaps) if d]

    def list_for_classes(self, class_ids: Sequence[str]) -> Sequence[Homework]:
        out: list[Homework] = []
        for batch in chunked(unique(class_ids)):
            q = self._col().where(filter=FieldFilter("classId", "in", batch))
            out.extend(homework_from_doc(d) for d in stream_dicts(q))
        out.sort(key=lambda h: h.due_date)
        return out

    def create(self, data: dict) -> str:
        _, ref = self._col().add(data)
        return ref.id

    def delete(self, homework_id: str) -> bool:
        ref = self._col().document(homework_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True


class FirestoreSubmissionRepository(SubmissionRepository):
    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(SUBMISSIONS_COLLECTION)

    def get_by_id(self, submission_id: str) -> Optional[HomeworkSubmission]:
        d = snapshot_to_dict(self._col().document(submission_id).get())
        return submission_from_doc(d) if d else None

    def get_for_student(self, homework_id: str, student_id: str) -> Optional[HomeworkSubmission]:
        q = (
            self._col()
            .where(filter=FieldFilter("homeworkId", "==", homework_id))
            .where(filter=FieldFilter("studentId", "==", student_id))
            .limit(1)
        )
        rows = stream_dicts(q)
        return submission_from_doc(rows[0]) if rows else None

    def list_for_homework(self, homework_id: str) -> Sequence[HomeworkSubmission]:
        q = self._col().where(filter=FieldFilter("homeworkId", "==", homework_id))
        subs = [submission_from_doc(d) for d in stream_dicts(q)]
        subs.sort(key=lambda s: s.student_name.lower())
        return subs

    def list_for_student(self, student_id: str) -> Sequence[HomeworkSubmission]:
        q = self._col().where(filter=FieldFilter("studentId", "==", student_id))
        return [submission_from_doc(d) for d in stream_dicts(q)]

    def create(self, data: dict) -> str:
        _, ref = self._col().add(data)
        return ref.id

    def set_grade(
        self,
        submission_id: str,
        *,
        grade: float,
        feedback: Optional[str],
        graded_by: str,
        graded_at: datetime,
    ) -> bool:
        ref = self._col().document(submission_id)
        if not ref.get().exists:
            return False
        ref.update(
            {
                "grade": grade,
                "feedback": feedback or "",
                "gradedBy": graded_by,
                "gradedAt": graded_at,
                "status": SubmissionStatus.GRADED.value,
            }
        )
        return True

    def delete_for_homework(self, homework_id: str) -> int:
        q = self._col().where(filter=FieldFilter("homeworkId", "==", homework_id))
        count = 0
        for snap in q.stream():
            snap.reference.delete()
            count += 1
        return count
