from django.contrib import admin
from .models import Loja, Funcionario, Servico

@admin.register(Loja)
class LojaAdmin(admin.ModelAdmin):
    list_display = ("nome", "owner", "slug", "ativa", "criada_em")
    list_filter = ("ativa",)
    search_fields = ("nome", "slug", "owner__email")

@admin.register(Funcionario)
class FuncionarioAdmin(admin.ModelAdmin):
    list_display = ("nome", "loja", "cargo", "email", "total_horarios", "ativo")
    list_filter = ("ativo", "cargo", "loja")
    search_fields = ("nome", "email", "loja__nome")
    raw_id_fields = ("user",)

    @admin.display(description="Horários")
    def total_horarios(self, obj):
        return obj.total_horarios

@admin.register(Servico)
class ServicoAdmin(admin.ModelAdmin):
    list_display = ("nome", "loja", "preco", "duracao_minutos", "ativo", "atualizado_em")
    list_filter = ("ativo", "loja")
    search_fields = ("nome", "slug", "descricao", "loja__nome")
    filter_horizontal = ("profissionais",)
