from __future__ import annotations

from dataclasses import dataclass

from .action_logs.firestore_action_log_repository import FirestoreActionLogRepository
from .action_logs.repository import ActionLogRepository
from .action_logs.service import ActionLogger, ActionLogService
from .attendance.firestore_attendance_repository import FirestoreAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .checkins.factory import CheckInStrategyFactory
from .checkins.firestore_checkin_repository import FirestoreCheckInRepository
from .checkins.repository import CheckInRepository
from .checkins.service import CheckInService
from .classes.firestore_class_repository import FirestoreClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .core.constants import DEFAULT_LATE_GRACE_MINUTES
from .database.connection import FirebaseConfig, FirebaseConnection
from .fees.firestore_fee_repository import FirestoreFeePaymentRepository, FirestoreReceiptRepository
from .fees.repository import FeePaymentRepository, ReceiptRepository
from .fees.service import FeeService
from .homework.firestore_homework_repository import FirestoreHomeworkRepository, FirestoreSubmissionRepository
from .homework.repository import HomeworkRepository, SubmissionRepository
from .homework.service import HomeworkService
from .lessons.firestore_lesson_repository import FirestoreLessonRepository
from .lessons.repository import LessonRepository
from .lessons.service import LessonService
from .materials.firestore_material_repository import FirebaseFileStorage, FirestoreMaterialRepository
from .materials.repository import FileStorage, MaterialRepository
from .materials.service import MaterialService
from .notifications.firestore_notification_repository import FirestoreNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .parents.service import ParentPortalService
from .payments.firestore_payment_repository import FirestorePaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentService
from .stats.service import TeacherAttendanceStatsService
from .substitutions.firestore_substitution_repository import FirestoreSubstitutionRepository
from .substitutions.repository import SubstitutionRepository
from .substitutions.service import SubstitutionService
from .users.firebase_identity import FirebaseIdentityProvider
from .users.firestore_user_repository import FirestoreUserRepository
from .users.repository import IdentityProvider, UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    classes_repo: ClassRepository

    action_logger: ActionLogger
    auth_service: AuthService
    user_service: UserService
    class_service: ClassService
    attendance_service: AttendanceService
    checkin_service: CheckInService
    stats_service: TeacherAttendanceStatsService
    homework_service: HomeworkService
    lesson_service: LessonService
    material_service: MaterialService
    substitution_service: SubstitutionService
    notification_service: NotificationService
    payment_service: PaymentService
    fee_service: FeeService
    parent_service: ParentPortalService
    action_log_service: ActionLogService


def build_container(
    *,
    users_repo: UserRepository,
    identity: IdentityProvider,
    classes_repo: ClassRepository,
    attendance_repo: AttendanceRepository,
    checkins_repo: CheckInRepository,
    homework_repo: HomeworkRepository,
    submissions_repo: SubmissionRepository,
    lessons_repo: LessonRepository,
    materials_repo: MaterialRepository,
    file_storage: FileStorage,
    substitutions_repo: SubstitutionRepository,
    notifications_repo: NotificationRepository,
    payments_repo: PaymentRepository,
    fee_payments_repo: FeePaymentRepository,
    receipts_repo: ReceiptRepository,
    action_logs_repo: ActionLogRepository,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
) -> Container:
    action_logger = ActionLogger(action_logs_repo)
    notification_service = NotificationService(notifications_repo)
    attendance_service = AttendanceService(attendance_repo, classes_repo)
    homework_service = HomeworkService(homework_repo, submissions_repo, classes_repo)
    lesson_service = LessonService(lessons_repo, classes_repo, materials_repo, homework_repo)
    fee_service = FeeService(fee_payments_repo, receipts_repo, users_repo, action_logger)

    return Container(
        users_repo=users_repo,
        classes_repo=classes_repo,
        action_logger=action_logger,
        auth_service=AuthService(users_repo, identity),
        user_service=UserService(users_repo, identity, action_logger),
        class_service=ClassService(classes_repo, users_repo, substitutions_repo, action_logger),
        attendance_service=attendance_service,
        checkin_service=CheckInService(
            checkins_repo,
            users_repo,
            classes_repo,
            strategy_factory=CheckInStrategyFactory(),
            grace_minutes=grace_minutes,
        ),
        stats_service=TeacherAttendanceStatsService(users_repo, classes_repo, checkins_repo),
        homework_service=homework_service,
        lesson_service=lesson_service,
        material_service=MaterialService(materials_repo, file_storage, classes_repo),
        substitution_service=SubstitutionService(substitutions_repo, classes_repo, users_repo, notification_service),
        notification_service=notification_service,
        payment_service=PaymentService(payments_repo, users_repo, action_logger),
        fee_service=fee_service,
        parent_service=ParentPortalService(
            users_repo, classes_repo, homework_service, lesson_service, attendance_service, fee_service
        ),
        action_log_service=ActionLogService(action_logs_repo),
    )


def build_firestore_container(*, firebase_config: dict, grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES) -> Container:
    config = FirebaseConfig(
        credentials_path=firebase_config.get("credentials_path") or None,
        project_id=firebase_config.get("project_id") or None,
        storage_bucket=firebase_config.get("storage_bucket") or None,
    )
    conn = FirebaseConnection.get_instance(config)
    db = conn.client()

    return build_container(
        users_repo=FirestoreUserRepository(db),
        identity=FirebaseIdentityProvider(conn),
        classes_repo=FirestoreClassRepository(db),
        attendance_repo=FirestoreAttendanceRepository(db),
        checkins_repo=FirestoreCheckInRepository(db),
        homework_repo=FirestoreHomeworkRepository(db),
        submissions_repo=FirestoreSubmissionRepository(db),
        lessons_repo=FirestoreLessonRepository(db),
        materials_repo=FirestoreMaterialRepository(db),
        file_storage=FirebaseFileStorage(conn),
        substitutions_repo=FirestoreSubstitutionRepository(db),
        notifications_repo=FirestoreNotificationRepository(db),
        payments_repo=FirestorePaymentRepository(db),
        fee_payments_repo=FirestoreFeePaymentRepository(db),
        receipts_repo=FirestoreReceiptRepository(db),
        action_logs_repo=FirestoreActionLogRepository(db),
        grace_minutes=grace_minutes,
    )
