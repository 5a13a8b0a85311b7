from django.db import migrations

from apps.cadastro.migracao import migrar_funcionarios, reverter_funcionarios


def _funcionarios(apps):
    Funcionario = apps.get_model("cadastro", "Funcionario")
    return Funcionario.objects.filter(horarios_trabalho__isnull=False).order_by("pk")


def normalizar(apps, schema_editor):
    migrar_funcionarios(_funcionarios(apps))


def reverter(apps, schema_editor):
    reverter_funcionarios(_funcionarios(apps))


class Migration(migrations.Migration):

    dependencies = [
        ("cadastro", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(normalizar, reverter),
    ]
