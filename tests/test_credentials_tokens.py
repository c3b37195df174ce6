"""
Credential store and access tokens.
"""
from datetime import timedelta
from unittest.mock import patch

from django.contrib.auth.hashers import make_password
from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts import services
from accounts.credentials import Credential, ensure_credential, hash_password, is_hashed, verify_password
from accounts.models import Role, User
from accounts.tokens import issue_token, resolve_token_user, verify_token
from core.exceptions import StaleToken, TokenExpired, TokenInvalid
from tests.base import PASSWORD, TenantFixturesMixin


class CredentialTests(TestCase):

    def test_hash_password_returns_tagged_credential(self):
        credential = hash_password("secret-pass")
        self.assertIsInstance(credential, Credential)
        self.assertTrue(credential.encoded.startswith(credential.scheme + "$"))
        self.assertNotIn("secret-pass", credential.encoded)
        self.assertNotIn(credential.encoded, repr(credential))

    def test_credential_is_never_hashed_twice(self):
        credential = hash_password("secret-pass")
        with self.assertRaises(TypeError):
            hash_password(credential)
        self.assertIs(ensure_credential(credential), credential)

    def test_set_password_keeps_credential_as_is(self):
        credential = hash_password("secret-pass")
        user = User(email="a@x.com", unique_id="A", display_name="A")
        user.set_password(credential)
        self.assertEqual(user.password, credential.encoded)
        self.assertTrue(verify_password("secret-pass", user.password))

    def test_plaintext_is_not_a_credential(self):
        self.assertFalse(is_hashed("secret-pass"))
        self.assertFalse(is_hashed(""))
        self.assertTrue(is_hashed(hash_password("secret-pass")))
        with self.assertRaises(ValueError):
            Credential.from_encoded("secret-pass")

    def test_verify_password(self):
        credential = hash_password("secret-pass")
        self.assertTrue(verify_password("secret-pass", credential))
        self.assertFalse(verify_password("wrong-pass", credential))
        self.assertFalse(verify_password("secret-pass", "secret-pass"))
        self.assertFalse(verify_password(None, credential))

    def test_unusable_credential_still_costs_a_hash(self):
        user = User(email="a@x.com", unique_id="A", display_name="A")
        user.set_unusable_password()
        with patch("accounts.credentials.make_password", wraps=make_password) as hasher:
            self.assertFalse(verify_password("secret-pass", user.password))
            self.assertFalse(verify_password("secret-pass", "not-a-hash"))
        self.assertEqual(hasher.call_count, 2)

    def test_empty_password_rejected(self):
        with self.assertRaises(ValueError):
            hash_password("")


class TokenTests(TenantFixturesMixin, TestCase):

    def setUp(self):
        self.org = self.make_org()
        self.admin = self.make_user(self.org, "admin@x.com", role=Role.ADMIN)
        self.member = self.make_user(self.org, "member@x.com")

    def test_claims_carry_role_and_organization(self):
        claims = verify_token(issue_token(self.member))
        self.assertEqual(claims["role"], Role.MEMBER)
        self.assertEqual(claims["organization_id"], str(self.org.pk))
        self.assertEqual(resolve_token_user(claims), self.member)

    def test_expired_token(self):
        raw = issue_token(self.member, lifetime=timedelta(seconds=-1))
        with self.assertRaises(TokenExpired):
            verify_token(raw)

    def test_tampered_token(self):
        header, payload, _ = issue_token(self.member).split(".")
        signature = issue_token(self.admin).split(".")[2]
        with self.assertRaises(TokenInvalid):
            verify_token(".".join([header, payload, signature]))
        with self.assertRaises(TokenInvalid):
            verify_token("not-a-token")

    def test_token_without_tenant_claims(self):
        with self.assertRaises(TokenInvalid):
            verify_token(str(AccessToken.for_user(self.member)))

    def test_token_is_stale_after_role_change(self):
        claims = verify_token(issue_token(self.member))
        services.change_role(self.admin, self.member.pk, Role.ADMIN)
        with self.assertRaises(StaleToken):
            resolve_token_user(claims)

    def test_token_is_stale_after_deletion(self):
        claims = verify_token(issue_token(self.member))
        services.delete_user(self.admin, self.member.pk)
        with self.assertRaises(StaleToken):
            resolve_token_user(claims)


class TokenApiTests(TenantFixturesMixin, TestCase):

    def setUp(self):
        self.client = APIClient()
        self.org = self.make_org()
        self.admin = self.make_user(self.org, "admin@x.com", role=Role.ADMIN)
        self.member = self.make_user(self.org, "member@x.com")

    def test_stale_role_rejected(self):
        client = self.client_for(self.member)
        self.assertEqual(client.get("/api/auth/me").status_code, 200)

        services.change_role(self.admin, self.member.pk, Role.ADMIN)
        res = client.get("/api/auth/me")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["code"], "stale_token")

    def test_deleted_user_rejected(self):
        client = self.client_for(self.member)
        services.delete_user(self.admin, self.member.pk)
        res = client.get("/api/auth/me")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["code"], "stale_token")

    def test_expired_token_rejected(self):
        raw = issue_token(self.member, lifetime=timedelta(seconds=-1))
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {raw}")
        res = self.client.get("/api/auth/me")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["code"], "token_expired")

    def test_garbage_token_rejected(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")
        res = self.client.get("/api/auth/me")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["code"], "token_invalid")

    def test_fresh_login_after_role_change(self):
        services.change_role(self.admin, self.member.pk, Role.ADMIN)
        res = self.client.post("/api/auth/login", {"email": "member@x.com", "password": PASSWORD}, format="json")
        self.assertEqual(res.status_code, 200)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['accessToken']}")
        me = self.client.get("/api/auth/me")
        self.assertEqual(me.data["role"], Role.ADMIN)
