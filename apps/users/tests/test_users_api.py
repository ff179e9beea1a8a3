"""API tests for profiles, customer management and token mirroring."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone

import jwt
from django.conf import settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import AppUser


def provider_token(**claims) -> str:
    payload = {"exp": datetime.now(dt_timezone.utc) + timedelta(minutes=5), **claims}
    return jwt.encode(payload, settings.SIMPLE_JWT["SIGNING_KEY"], algorithm="HS256")


class IdentityMirroringTests(APITestCase):
    def test_first_request_mirrors_new_customer(self):
        token = provider_token(sub="idp-uid-1", email="asha@example.com", name="Asha")
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        response = self.client.get(reverse("user-me"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["uid"], "idp-uid-1")
        self.assertEqual(response.data["role"], AppUser.Role.CUSTOMER)
        self.assertEqual(response.data["display_name"], "Asha")
        self.assertEqual(AppUser.objects.count(), 1)

    def test_known_subject_reuses_account(self):
        user = AppUser.objects.create_user(email="asha@example.com", uid="idp-uid-1", display_name="Asha K")
        token = provider_token(sub="idp-uid-1", email="asha@example.com", name="Someone Else")
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        response = self.client.get(reverse("user-me"))

        self.assertEqual(response.data["id"], user.id)
        self.assertEqual(response.data["display_name"], "Asha K")
        self.assertEqual(AppUser.objects.count(), 1)

    def test_local_superuser_is_linked_to_provider_subject(self):
        owner = AppUser.objects.create_superuser(email="owner@example.com", password="x")
        token = provider_token(sub="idp-owner", email="owner@example.com", name="Owner")
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        response = self.client.get(reverse("user-me"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["id"], owner.id)
        owner.refresh_from_db()
        self.assertEqual(owner.uid, "idp-owner")
        self.assertEqual(AppUser.objects.count(), 1)

    def test_email_owned_by_another_subject_is_rejected(self):
        AppUser.objects.create_user(email="asha@example.com", uid="idp-uid-1")
        token = provider_token(sub="idp-uid-2", email="asha@example.com")
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        response = self.client.get(reverse("user-me"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(AppUser.objects.filter(uid="idp-uid-2").exists())

    def test_token_without_subject_is_rejected(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {provider_token(email='x@example.com')}")
        response = self.client.get(reverse("user-me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_bad_signature_is_rejected(self):
        token = jwt.encode(
            {"sub": "idp-uid-1", "exp": datetime.now(dt_timezone.utc) + timedelta(minutes=5)},
            "another-signing-key-that-is-long-enough-too",
            algorithm="HS256",
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        response = self.client.get(reverse("user-me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class ProfileAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = AppUser.objects.create_user(email="asha@example.com", display_name="Asha")
        self.client.force_authenticate(self.user)

    def test_update_profile(self):
        response = self.client.patch(
            reverse("user-me"),
            {"phone_number": "+919800000001", "city": "Indore", "zip": "452011"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.zip_code, "452011")
        self.assertEqual(self.user.city, "Indore")

    def test_role_and_email_are_not_editable(self):
        self.client.patch(
            reverse("user-me"),
            {"role": "admin", "email": "other@example.com"},
            format="json",
        )
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, AppUser.Role.CUSTOMER)
        self.assertEqual(self.user.email, "asha@example.com")

    def test_invalid_phone(self):
        response = self.client.patch(reverse("user-me"), {"phone_number": "call me"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class CustomerManagementAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = AppUser.objects.create_user(email="admin@example.com", role=AppUser.Role.ADMIN)
        self.customer = AppUser.objects.create_user(email="asha@example.com")

    def test_customer_cannot_list_users(self):
        self.client.force_authenticate(self.customer)
        response = self.client.get(reverse("user-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_lists_customers(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse("user-list"), {"role": "customer"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["email"] for item in response.data], ["asha@example.com"])

    def test_admin_promotes_customer(self):
        self.client.force_authenticate(self.admin)
        response = self.client.patch(
            reverse("user-role", kwargs={"pk": self.customer.pk}),
            {"role": "admin"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.customer.refresh_from_db()
        self.assertTrue(self.customer.is_store_admin())

    def test_admin_cannot_demote_self(self):
        self.client.force_authenticate(self.admin)
        response = self.client.patch(
            reverse("user-role", kwargs={"pk": self.admin.pk}),
            {"role": "customer"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
