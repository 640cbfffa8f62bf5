# backend/app/services/points_service.py
"""
Points Service for the EduMarket platform

The points ledger. Every balance change goes through ``credit``/``debit``
so the user's cached balance and the transaction history never diverge.
Those two helpers do not commit; the public operations below, and the
other services that call them, wrap them in a transaction.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import PaymentReferenceType, PaymentStatus, PointsTransactionType
from ..core.exceptions import InsufficientPointsException, NotFoundException, ValidationException
from ..models.points import PointsPackage, PointsTransaction
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .enrollment_service import EnrollmentService

logger = logging.getLogger(__name__)


class PointsService(BaseService):
    """Service for balances, point movements and points packages."""

    def __init__(self, db: Session, transaction_repository=None):
        super().__init__(db)
        self.transaction_repository = transaction_repository or RepositoryFactory.create_points_transaction_repository(
            db
        )
        self.package_repository = RepositoryFactory.create_points_package_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.course_repository = RepositoryFactory.create_course_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)

    # Ledger

    def credit(
        self,
        user: User,
        amount: int,
        type_: str,
        description: str,
        reference_id: Optional[str] = None,
    ) -> PointsTransaction:
        self.user_repository.adjust_points(user, amount)
        return self._record(user, amount, type_, description, reference_id)

    def _record(
        self, user: User, amount: int, type_: str, description: str, reference_id: Optional[str]
    ) -> PointsTransaction:
        transaction = self.transaction_repository.create(
            user_id=user.id,
            amount=amount,
            type=type_,
            description=description,
            reference_id=reference_id,
        )
        prometheus_metrics.inc_points_movement(type_)
        return transaction

    def debit(
        self,
        user: User,
        amount: int,
        type_: str,
        description: str,
        reference_id: Optional[str] = None,
    ) -> PointsTransaction:
        """
        Record a deduction as a negative transaction.

        The balance check is part of the UPDATE itself, so two concurrent
        deductions cannot overdraw the account.
        """
        if not self.user_repository.adjust_points(user, -amount, keep_non_negative=True):
            raise InsufficientPointsException(balance=user.points or 0, required=amount)
        return self._record(user, -amount, type_, description, reference_id)

    def _get_user_or_404(self, user_id: str) -> User:
        user = self.user_repository.get_by_id(user_id, load_relationships=False)
        if user is None:
            raise NotFoundException("User not found")
        return user

    # Balance and history

    @BaseService.measure_operation("get_points_balance")
    def get_balance(self, user_id: str) -> int:
        return self._get_user_or_404(user_id).points or 0

    @BaseService.measure_operation("get_points_transactions")
    def get_transactions(self, user_id: str, limit: Optional[int] = None) -> List[PointsTransaction]:
        return self.transaction_repository.list_for_user(user_id, limit=limit)

    @BaseService.measure_operation("list_points_packages")
    def get_active_packages(self) -> List[PointsPackage]:
        return self.package_repository.list_active()

    @staticmethod
    def _check_movement(amount: Any, type_: Optional[str], description: Optional[str]) -> None:
        if not amount or not type_ or not description:
            raise ValidationException("Amount, type, and description are required")
        if amount < 0:
            raise ValidationException("Amount must be positive")

    @BaseService.measure_operation("add_points")
    def add_points(self, user_id: str, amount: Optional[int], type_: Optional[str], description: Optional[str]):
        self._check_movement(amount, type_, description)
        user = self._get_user_or_404(user_id)
        with self.transaction():
            transaction = self.credit(user, amount, type_, description)
        self.log_operation("add_points", user_id=user_id, amount=amount, type=type_)
        return transaction

    @BaseService.measure_operation("deduct_points")
    def deduct_points(self, user_id: str, amount: Optional[int], type_: Optional[str], description: Optional[str]):
        self._check_movement(amount, type_, description)
        user = self._get_user_or_404(user_id)
        with self.transaction():
            transaction = self.debit(user, amount, type_, description)
        self.log_operation("deduct_points", user_id=user_id, amount=amount, type=type_)
        return transaction

    # Packages

    def _get_active_package(self, package_id: Optional[str]) -> PointsPackage:
        package = self.package_repository.get_by_id(package_id, load_relationships=False) if package_id else None
        if package is None or not package.is_active:
            raise NotFoundException("Points package not found or inactive")
        return package

    @staticmethod
    def package_metadata(package: PointsPackage, user_id: str) -> Dict[str, Any]:
        return {
            "reference_type": PaymentReferenceType.POINTS_PACKAGE.value,
            "reference_id": package.id,
            "user_id": user_id,
            "package_name": package.name,
            "points_amount": str(package.points),
        }

    @BaseService.measure_operation("create_package_payment_intent")
    def create_package_payment_intent(self, user_id: str, package_id: Optional[str]) -> Dict[str, Any]:
        """Open a gateway payment intent priced at the package's price."""
        from .payment_service import PaymentService

        if not package_id:
            raise ValidationException("Package ID is required")
        package = self._get_active_package(package_id)

        intent = PaymentService(self.db).create_payment_intent(
            amount=int(round(package.price * 100)),
            currency=settings.default_currency,
            metadata=self.package_metadata(package, user_id),
        )
        return {
            "client_secret": intent["client_secret"],
            "package_details": {
                "id": package.id,
                "name": package.name,
                "points": package.points,
                "price": package.price,
            },
        }

    @BaseService.measure_operation("purchase_points_package")
    def purchase_package(self, user_id: str, package_id: Optional[str], payment_method: Optional[str]) -> Dict[str, Any]:
        """
        Direct purchase that skips the gateway round trip.

        Writes an already completed payment and credits the points at once.
        """
        if not package_id or not payment_method:
            raise ValidationException("Package ID and payment method are required")
        package = self._get_active_package(package_id)
        user = self._get_user_or_404(user_id)
        payment_repository = RepositoryFactory.create_payment_repository(self.db)

        with self.transaction():
            payment_repository.create(
                user_id=user_id,
                reference_id=f"mock_{int(time.time() * 1000)}",
                reference_type=PaymentReferenceType.POINTS_PACKAGE.value,
                amount=package.price,
                status=PaymentStatus.COMPLETED.value,
                payment_method=payment_method,
                payment_metadata=self.package_metadata(package, user_id),
            )
            transaction = self.credit(
                user,
                package.points,
                PointsTransactionType.PURCHASE.value,
                f"Purchased {package.name} package",
                reference_id=package.id,
            )

        prometheus_metrics.inc_payment(PaymentReferenceType.POINTS_PACKAGE.value, PaymentStatus.COMPLETED.value)
        self.log_operation("purchase_points_package", user_id=user_id, package_id=package.id)
        return {
            "transaction": transaction,
            "success": True,
            "message": f"Successfully purchased {package.points} points",
        }

    # Spending

    @BaseService.measure_operation("purchase_courses_with_points")
    def purchase_courses(
        self,
        user_id: str,
        course_ids: Optional[List[str]],
        total_points_price: Optional[int],
        description: Optional[str],
    ) -> Dict[str, Any]:
        """
        Buy one or more published courses with points.

        The deduction, its ledger row and the enrollments are written in one
        transaction.

        Raises:
            ValidationException: On missing input, an insufficient balance,
                unpublished courses, a price mismatch or an existing enrollment
        """
        if not course_ids:
            raise ValidationException("Course IDs are required")
        if not total_points_price or not description:
            raise ValidationException("Total points price and description are required")

        course_ids = list(dict.fromkeys(course_ids))
        user = self._get_user_or_404(user_id)
        if (user.points or 0) < total_points_price:
            raise InsufficientPointsException(balance=user.points or 0, required=total_points_price)

        courses = self.course_repository.get_published_by_ids(course_ids)
        if len(courses) != len(course_ids):
            raise ValidationException("Some courses are invalid or not published")
        if sum(course.points_price for course in courses) != total_points_price:
            raise ValidationException("Points price mismatch")
        if self.enrollment_repository.enrolled_course_ids(user_id, course_ids):
            raise ValidationException("You are already enrolled in one or more of these courses")

        with self.transaction():
            transaction = self.debit(
                user, total_points_price, PointsTransactionType.COURSE_PURCHASE.value, description
            )
            enrollments = EnrollmentService(self.db, self.enrollment_repository).enroll_many(
                user_id, course_ids, source="points"
            )

        self.log_operation("purchase_courses_with_points", user_id=user_id, courses=len(courses))
        return {
            "success": True,
            "message": f"Successfully purchased {len(courses)} course(s) with {total_points_price} points",
            "transaction": transaction,
            "enrollments": enrollments,
        }

    @BaseService.measure_operation("purchase_course_with_points")
    def purchase_course(self, user_id: str, course_id: str) -> Dict[str, Any]:
        """Single course purchase priced from the course itself."""
        course = self.course_repository.get_by_id(course_id, load_relationships=False)
        if course is None:
            raise NotFoundException("Course not found")
        if not course.is_published:
            raise ValidationException("Course is not available for purchase")
        if not course.points_price:
            raise ValidationException("Course cannot be purchased with points")
        return self.purchase_courses(
            user_id,
            [course.id],
            course.points_price,
            f"Purchased course: {course.title}",
        )
