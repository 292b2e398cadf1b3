# config.py
# -*- coding: utf-8 -*-
"""
Configurações centralizadas do Portal Frota (Guias de Remessa)
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Carrega variáveis de ambiente (apenas se existir .env)
load_dotenv()

# ==================================================
# AMBIENTE
# ==================================================
ENV = os.getenv("ENV", "development")
IS_PRODUCTION = ENV == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if IS_PRODUCTION else "DEBUG").upper()
SERVICE_NAME = "portal-frota"

# ==================================================
# CONFIGURAÇÕES DO BANCO DE DADOS
# ==================================================
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./frota.db")

# Alguns provedores usam postgres:// mas SQLAlchemy precisa de postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# ==================================================
# CONFIGURAÇÕES DE AUTENTICAÇÃO JWT
# ==================================================
# ATENÇÃO: Em produção, SEMPRE defina SECRET_KEY via variável de ambiente
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings
    warnings.warn("SECRET_KEY não definida! Usando chave temporária. DEFINA EM PRODUÇÃO!", RuntimeWarning)
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"

ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))  # 8 horas

# Custo do hash bcrypt
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Orçamentista inicial (aprovado), criado quando o banco está vazio
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@frota.com.br")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Administrador")
ADMIN_CPF = os.getenv("ADMIN_CPF", "52998224725")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
if not ADMIN_PASSWORD:
    import warnings
    warnings.warn("ADMIN_PASSWORD não definida! Usando senha padrão insegura.", RuntimeWarning)
    ADMIN_PASSWORD = "admin"

# ==================================================
# CONFIGURAÇÕES DE ARQUIVOS
# ==================================================
BASE_DIR = Path(__file__).resolve().parent
UPLOAD_FOLDER = Path(os.getenv("UPLOAD_FOLDER", str(BASE_DIR / "uploads")))
UPLOAD_URL_PREFIX = "/uploads"
ALLOWED_PHOTO_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif", "image/heic"}
MAX_PHOTO_SIZE = int(os.getenv("MAX_PHOTO_SIZE", str(10 * 1024 * 1024)))  # 10MB

TEMPLATES_DIR = BASE_DIR / "templates"

# ==================================================
# OUTRAS CONFIGURAÇÕES
# ==================================================
TIMEZONE_LOCAL_NAME = os.getenv("TIMEZONE_LOCAL", "America/Sao_Paulo")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

# Mensagem genérica para erros internos (detalhes apenas no log)
ERRO_500_MENSAGEM = "Oops, ocorreu um erro, tente novamente e aguarde alguns minutos."
