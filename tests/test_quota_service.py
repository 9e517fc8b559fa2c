from datetime import timedelta

import pytest
from sqlalchemy import update

from concerndesk.models import TeacherAccount
from concerndesk.services import quota_service
from concerndesk.services.quota_service import LIMIT_REACHED, SUBSCRIPTION_INACTIVE, QuotaRuleViolation
from concerndesk.utils.datetime import utcnow

from conftest import UNLIMITED_EMAIL


class TestCheckLimit:
    def test_package_adds_ten_to_limit(self, db_session, make_teacher):
        teacher = make_teacher(support_requests_limit=20, additional_packages=1, support_requests_used_this_month=29)

        status = quota_service.check_limit(db_session, email=teacher.email)

        assert status.total_limit == 30
        assert status.can_create is True
        assert status.reason is None

    @pytest.mark.parametrize(
        "base_limit,packages,used",
        [(0, 0, 0), (20, 0, 19), (20, 0, 20), (5, 3, 34), (5, 3, 35), (0, 2, 25)],
    )
    def test_can_create_follows_usage_when_active(self, db_session, make_teacher, base_limit, packages, used):
        teacher = make_teacher(
            support_requests_limit=base_limit,
            additional_packages=packages,
            support_requests_used_this_month=used,
        )

        status = quota_service.check_limit(db_session, email=teacher.email)

        assert status.total_limit == base_limit + packages * 10
        assert status.can_create == (used < status.total_limit)

    def test_limit_reached_reason(self, db_session, make_teacher):
        teacher = make_teacher(support_requests_used_this_month=20)

        status = quota_service.check_limit(db_session, email=teacher.email)

        assert status.can_create is False
        assert status.reason == LIMIT_REACHED

    def test_expired_subscription_takes_precedence(self, db_session, make_teacher):
        teacher = make_teacher(
            subscription_end_date=utcnow() - timedelta(days=1),
            support_requests_used_this_month=0,
        )

        status = quota_service.check_limit(db_session, email=teacher.email)

        assert status.can_create is False
        assert status.reason == SUBSCRIPTION_INACTIVE
        assert status.total_limit == 20

    def test_missing_subscription_is_inactive(self, db_session, make_teacher):
        teacher = make_teacher(subscription_end_date=None)

        status = quota_service.check_limit(db_session, email=teacher.email)

        assert status.can_create is False
        assert status.reason == SUBSCRIPTION_INACTIVE

    def test_email_lookup_is_case_insensitive(self, db_session, make_teacher):
        teacher = make_teacher()

        status = quota_service.check_limit(db_session, email=teacher.email.upper())

        assert status.can_create is True

    def test_unknown_account(self, db_session):
        with pytest.raises(QuotaRuleViolation) as excinfo:
            quota_service.check_limit(db_session, email="nobody@example.edu")

        assert excinfo.value.status_code == 404

    def test_unlimited_tier_needs_no_account(self, db_session):
        status = quota_service.check_limit(db_session, email=UNLIMITED_EMAIL)

        assert status.can_create is True
        assert status.used == 0
        assert status.total_limit == 999


class TestIncrementUsage:
    def test_sequential_increments_are_monotonic(self, db_session, make_teacher):
        teacher = make_teacher(support_requests_used_this_month=3)

        counts = [quota_service.increment_usage(db_session, email=teacher.email).new_usage_count for _ in range(4)]
        db_session.commit()

        assert counts == [4, 5, 6, 7]
        assert quota_service.check_limit(db_session, email=teacher.email).used == 7

    def test_unknown_account(self, db_session):
        with pytest.raises(QuotaRuleViolation) as excinfo:
            quota_service.increment_usage(db_session, email="nobody@example.edu")

        assert excinfo.value.status_code == 404

    def test_reports_count_written_by_the_update(self, db_session, make_teacher):
        teacher = make_teacher(support_requests_used_this_month=3)
        db_session.execute(
            update(TeacherAccount)
            .where(TeacherAccount.id == teacher.id)
            .values(support_requests_used_this_month=10)
            .execution_options(synchronize_session=False)
        )

        result = quota_service.increment_usage(db_session, email=teacher.email)

        assert result.new_usage_count == 11

    def test_unlimited_tier_is_a_no_op(self, db_session):
        result = quota_service.increment_usage(db_session, email=UNLIMITED_EMAIL)

        assert result.success is True
        assert result.new_usage_count == 0


class TestReserveUsage:
    def test_reserves_until_limit(self, db_session, make_teacher):
        teacher = make_teacher(support_requests_limit=2)

        results = [quota_service.reserve_usage(db_session, email=teacher.email) for _ in range(3)]
        db_session.commit()

        assert results == [True, True, False]
        assert quota_service.check_limit(db_session, email=teacher.email).used == 2

    def test_refuses_inactive_subscription(self, db_session, make_teacher):
        teacher = make_teacher(subscription_end_date=utcnow() - timedelta(hours=1))

        assert quota_service.reserve_usage(db_session, email=teacher.email) is False


class TestPurchasePackages:
    @pytest.mark.parametrize("packages", [1, 4, 10])
    def test_adds_packages_and_limit(self, db_session, make_teacher, packages):
        teacher = make_teacher(support_requests_limit=20, additional_packages=2)

        result = quota_service.purchase_packages(db_session, email=teacher.email, packages=packages)

        assert result.new_package_count == 2 + packages
        assert result.new_total_limit == 40 + packages * 10

    @pytest.mark.parametrize("packages", [0, 11, -1])
    def test_rejects_out_of_range(self, db_session, make_teacher, packages):
        teacher = make_teacher()

        with pytest.raises(QuotaRuleViolation) as excinfo:
            quota_service.purchase_packages(db_session, email=teacher.email, packages=packages)

        assert excinfo.value.status_code == 400

    def test_unknown_account(self, db_session):
        with pytest.raises(QuotaRuleViolation) as excinfo:
            quota_service.purchase_packages(db_session, email="nobody@example.edu", packages=1)

        assert excinfo.value.status_code == 404
