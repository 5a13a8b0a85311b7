from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.core.validators import RegexValidator

class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("O e-mail é obrigatório")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_owner", True)
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser precisa is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser precisa is_superuser=True")
        return self._create_user(email, password, **extra_fields)

class User(AbstractUser):
    username = None  # login por e-mail
    email = models.EmailField(unique=True)

    # flags de perfil
    is_owner = models.BooleanField(default=False)
    is_client = models.BooleanField(default=False)

    phone_regex = RegexValidator(r"^\+?\d{10,15}$", "Informe telefone no formato internacional, ex.: +5585...")
    phone = models.CharField(max_length=17, blank=True, null=True, validators=[phone_regex])
    full_name = models.CharField(max_length=120, blank=True, null=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    def __str__(self):
        if self.is_owner:
            role = "Owner"
        elif hasattr(self, "funcionario"):
            role = "Profissional"
        elif self.is_client:
            role = "Cliente"
        else:
            role = "Usuário"
        return f"{self.email or self.full_name} ({role})"
