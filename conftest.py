"""
Configuração global de testes pytest
"""
import sys
import os
import tempfile

# Adiciona o diretório raiz ao PYTHONPATH ANTES de qualquer outra coisa
# Isso é necessário para que pytest possa importar módulos do projeto
# durante a coleta de testes
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

# Configura variáveis de ambiente para testes (antes do import de config)
os.environ.setdefault('ENV', 'test')
os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ.setdefault('ADMIN_PASSWORD', 'test-admin-password')
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('RATE_LIMIT_ENABLED', 'false')
os.environ.setdefault('BCRYPT_ROUNDS', '4')
os.environ.setdefault('UPLOAD_FOLDER', tempfile.mkdtemp(prefix='frota-uploads-'))
