from django.conf import settings
from django.db import models
from django.utils.text import slugify
from django.core.validators import MinValueValidator, RegexValidator
from django.core.exceptions import ValidationError

from .horarios import esta_normalizado, contar_horarios

User = settings.AUTH_USER_MODEL

# ----- Lojas -------

class Loja(models.Model):
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='lojas',
        limit_choices_to={'is_owner': True}
    )
    nome = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140, unique=True, blank=True)
    email = models.EmailField(blank=True)
    telefone = models.CharField(max_length=20, blank=True)
    endereco = models.CharField(max_length=200, blank=True)
    site = models.URLField(blank=True)
    ativa = models.BooleanField(default=True)
    criada_em = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        if not self.slug:
            base = slugify(self.nome)
            slug = base or 'loja'
            i = 1
            while Loja.objects.filter(slug=slug).exclude(pk=self.pk).exists():
                i += 1
                slug = f"{base}-{i}"
            self.slug = slug
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.nome} ({self.owner.email})"

# --- Funcionários ---

class Funcionario(models.Model):
    class Cargo(models.TextChoices):
        BARBEIRO = 'barbeiro', 'Barbeiro'
        CABELEIREIRO = 'cabeleireiro', 'Cabeleireiro(a)'
        ESTETICISTA = 'esteticista', 'Esteticista'
        PSICANALISTA = 'psicanalista', 'Psicanalista'
        TERAPEUTA = 'terapeuta', 'Terapeuta'
        RECEPCAO = 'recepcao', 'Recepção'
        OUTRO = 'outro', 'Outro'

    phone_regex = RegexValidator(
        r'^\+?\d{10,15}$',
        'Informe telefone no formato internacional, ex.: +5585...'
    )

    loja = models.ForeignKey('Loja', on_delete=models.CASCADE, related_name='funcionarios')
    user = models.OneToOneField(
        User,
        on_delete=models.SET_NULL,
        related_name='funcionario',
        blank=True,
        null=True,
    )
    nome = models.CharField(max_length=120)
    cargo = models.CharField(max_length=20, choices=Cargo.choices, default=Cargo.OUTRO)
    email = models.EmailField(blank=True, null=True)
    telefone = models.CharField(max_length=17, blank=True, null=True, validators=[phone_regex])
    slug = models.SlugField(max_length=160, blank=True)
    ativo = models.BooleanField(default=True)

    # Formato legado: {"tuesday": ["08:00", ...]}
    # Formato novo:   {"timeSlots": [...], "timeOffs": []}
    horarios_trabalho = models.JSONField(
        blank=True,
        null=True,
        help_text='Horários de atendimento (formato legado por dia ou formato com timeSlots)',
    )

    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        if not self.slug:
            base = slugify(self.nome) or 'funcionario'
            tentativa = base
            i = 1
            while Funcionario.objects.filter(loja=self.loja, slug=tentativa).exclude(pk=self.pk).exists():
                i += 1
                tentativa = f'{base}-{i}'
            self.slug = tentativa
        super().save(*args, **kwargs)

    def clean(self):
        horarios = self.horarios_trabalho
        if horarios is None:
            return
        if not isinstance(horarios, dict):
            raise ValidationError({'horarios_trabalho': 'Os horários devem ser um objeto JSON.'})
        if esta_normalizado(horarios):
            if not isinstance(horarios['timeSlots'], list):
                raise ValidationError({'horarios_trabalho': '"timeSlots" deve ser uma lista.'})
            return
        for dia, lista in horarios.items():
            if not isinstance(lista, list):
                raise ValidationError({'horarios_trabalho': f'Horários de "{dia}" devem ser uma lista.'})

    @property
    def total_horarios(self):
        return contar_horarios(self.horarios_trabalho)

    def __str__(self):
        return f'{self.nome} – {self.loja.nome}'

    class Meta:
        verbose_name = 'Funcionário'
        verbose_name_plural = 'Funcionários'
        unique_together = (('loja', 'slug'),)
        ordering = ('nome',)

# ------ Serviços -----

class Servico(models.Model):
    loja = models.ForeignKey(Loja, on_delete=models.CASCADE, related_name='servicos')

    nome = models.CharField(max_length=160)
    slug = models.SlugField(max_length=180, blank=True)

    descricao = models.TextField(blank=True)
    duracao_minutos = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)], default=60)
    preco = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])

    profissionais = models.ManyToManyField('Funcionario', related_name='servicos', blank=True)

    ativo = models.BooleanField(default=True)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        if not self.slug:
            base = slugify(self.nome) or 'servico'
            tentativa = base
            i = 1
            while Servico.objects.filter(loja=self.loja, slug=tentativa).exclude(pk=self.pk).exists():
                i += 1
                tentativa = f"{base}-{i}"
            self.slug = tentativa
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.nome} – {self.loja.nome}"

    class Meta:
        verbose_name = "Serviço"
        verbose_name_plural = "Serviços"
        ordering = ("nome",)
        unique_together = (("loja", "slug"),)
