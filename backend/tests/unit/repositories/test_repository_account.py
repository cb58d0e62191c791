"""Unit tests for AccountRepository."""

import pytest

from channelhub.repositories.account import AccountRepository
from channelhub.services._shared.errors import NotFoundError
from tests.factories.account import AccountFactory


class TestAccountRepository:
    """Ensure ``AccountRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self):
        return AccountRepository()

    def test_find_by_username_or_email_is_case_insensitive(self, repo, session):
        account = AccountFactory(username="alice", email="alice@example.com")
        session.commit()

        assert repo.find_by_username_or_email("ALICE").id == account.id
        assert repo.find_by_username_or_email(" Alice@Example.com ").id == account.id
        assert repo.find_by_username_or_email("nobody") is None

    def test_exists_username_or_email(self, repo, session):
        AccountFactory(username="bob", email="bob@example.com")
        session.commit()

        assert repo.exists_username_or_email("bob", "new@example.com")
        assert repo.exists_username_or_email("new", "BOB@example.com")
        assert not repo.exists_username_or_email("new", "new@example.com")

    def test_email_taken_by_other(self, repo, session):
        a = AccountFactory(email="a@example.com")
        b = AccountFactory(email="b@example.com")
        session.commit()

        assert repo.email_taken_by_other("b@example.com", a.id)
        assert not repo.email_taken_by_other("a@example.com", a.id)
        assert not repo.email_taken_by_other("free@example.com", b.id)

    def test_get_or_raise(self, repo, session):
        account = AccountFactory()
        session.commit()

        assert repo.get_or_raise(account.id).id == account.id
        assert repo.get_or_raise(account.id, for_update=True).id == account.id
        with pytest.raises(NotFoundError):
            repo.get_or_raise(999_999)

    def test_set_refresh_token_and_clear(self, repo, session):
        account = AccountFactory()
        session.commit()

        repo.set_refresh_token(account.id, "rt-1")
        session.commit()
        assert repo.get(account.id).refresh_token == "rt-1"

        repo.set_refresh_token(account.id, None)
        session.commit()
        assert repo.get(account.id).refresh_token is None

    def test_set_password(self, repo, session):
        account = AccountFactory(password="old-pass")
        session.commit()
        old_hash = account.password_hash

        repo.set_password(account.id, "new-pass")
        session.commit()

        refreshed = repo.get(account.id)
        assert refreshed.password_hash != old_hash
        assert refreshed.verify_password("new-pass")

    def test_update_rejects_non_whitelisted_fields(self, repo, session):
        account = AccountFactory()
        session.commit()

        with pytest.raises(ValueError):
            repo.update(account, refresh_token="forged")

    def test_update_profile_fields(self, repo, session):
        account = AccountFactory(full_name="Old Name")
        session.commit()

        repo.update(account, full_name="New Name", cover_image_url="https://media.local/c.png")
        session.commit()

        refreshed = repo.get(account.id)
        assert refreshed.full_name == "New Name"
        assert refreshed.cover_image_url == "https://media.local/c.png"

    def test_filter_whitelist(self, repo, session):
        AccountFactory(username="carol")
        session.commit()

        assert repo.exists(username="carol")
        with pytest.raises(ValueError):
            repo.find_one(password_hash="x")
