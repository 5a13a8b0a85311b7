from django.contrib.auth import get_user_model
from django.test import TestCase


class UserManagerTests(TestCase):
    def setUp(self):
        self.User = get_user_model()

    def test_create_user_normaliza_email(self):
        user = self.User.objects.create_user(email="Owner@EXAMPLE.com", password="123")
        self.assertEqual(user.email, "Owner@example.com")
        self.assertTrue(user.check_password("123"))
        self.assertFalse(user.is_staff)

    def test_create_user_sem_senha(self):
        user = self.User.objects.create_user(email="cliente@example.com")
        self.assertFalse(user.has_usable_password())

    def test_create_user_exige_email(self):
        with self.assertRaises(ValueError):
            self.User.objects.create_user(email="", password="123")

    def test_create_superuser_e_owner(self):
        admin = self.User.objects.create_superuser(email="admin@example.com", password="123")
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_superuser)
        self.assertTrue(admin.is_owner)
        self.assertEqual(str(admin), "admin@example.com (Owner)")
