from django.apps import AppConfig

class CadastroConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.cadastro'
    label = 'cadastro'
    verbose_name = 'Cadastro (lojas, profissionais e serviços)'
