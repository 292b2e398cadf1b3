# tests/conftest.py
"""
Configuração global do pytest para o Portal Frota.

Este arquivo é executado automaticamente pelo pytest antes dos testes.

Cada teste recebe um banco SQLite em memória novo (StaticPool, para que o
TestClient e a sessão do teste enxerguem a mesma conexão) e um TestClient
com get_db sobrescrito.
"""

import sys
import os
import tempfile

# Adiciona o diretório raiz do projeto ao PYTHONPATH
# para que os imports funcionem corretamente nos testes
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Configura variáveis de ambiente para testes
os.environ.setdefault("ENV", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_PASSWORD", "test-admin-password")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("UPLOAD_FOLDER", tempfile.mkdtemp(prefix="frota-uploads-"))


import base64
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth.models import User, UserStatus, UserType
from auth.security import create_session_token, get_password_hash
from database.connection import Base, get_db, habilitar_foreign_keys_sqlite
from main import app
from sistemas.bases.models import Base as BaseOficina, BaseAddress
from sistemas.service_items.models import ServiceItem

# PNG 1x1 válido
PNG_1X1 = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="
)
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_1X1).decode("ascii")

SENHA_PADRAO = "senha123"

DURACAO = {"from": "2026-03-01T08:00:00Z", "to": "2026-03-01T10:30:00Z"}


# ==================================================
# BANCO E CLIENTE
# ==================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    habilitar_foreign_keys_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """TestClient sem lifespan (o banco é o da fixture, não o de config)."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app, raise_server_exceptions=False)
    yield test_client
    app.dependency_overrides.clear()


# ==================================================
# USUÁRIOS E SESSÕES
# ==================================================

@pytest.fixture
def criar_usuario(db):
    """Fábrica de usuários gravados direto no banco."""
    def _criar(
        email: str,
        cpf: str,
        type: UserType = UserType.MECHANIC,
        status: UserStatus = UserStatus.APPROVED,
        name: str = "Usuário Teste",
    ) -> User:
        user = User(
            name=name,
            cpf=cpf,
            email=email,
            hashed_password=get_password_hash(SENHA_PADRAO),
            type=type.value,
            status=status.value,
            birth_date=date(1990, 1, 1),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _criar


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_session_token(user)}"}


@pytest.fixture
def orcamentista(criar_usuario):
    return criar_usuario(
        "orcamentista@frota.com.br", "52998224725",
        type=UserType.BUDGETIST, name="Orçamentista",
    )


@pytest.fixture
def mecanico(criar_usuario):
    return criar_usuario("mecanico@frota.com.br", "11144477735", name="Mecânico")


@pytest.fixture
def headers_orcamentista(orcamentista):
    return auth_headers(orcamentista)


@pytest.fixture
def headers_mecanico(mecanico):
    return auth_headers(mecanico)


# ==================================================
# CADASTROS
# ==================================================

@pytest.fixture
def base_oficina(db):
    base = BaseOficina(
        name="Boituva",
        phone="1533631234",
        address=BaseAddress(
            street="Rua das Oficinas", number="100", neighborhood="Centro",
            city="Boituva", state="SP", zip_code="18550000",
        ),
    )
    db.add(base)
    db.commit()
    db.refresh(base)
    return base


@pytest.fixture
def item_servico(db, base_oficina):
    item = ServiceItem(name="Troca de óleo", value=Decimal("100.00"), base_id=base_oficina.id)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def servico_payload(item_id: str, **extra) -> dict:
    """Serviço no formato enviado pelo app."""
    dados = {
        "itemId": item_id,
        "category": "LABOR",
        "type": "PREVENTIVE",
        "quantity": 1,
        "value": 100,
        "discount": 0,
        "labor": "João",
        "duration": DURACAO,
    }
    dados.update(extra)
    return dados


@pytest.fixture
def criar_ordem_api(client, headers_mecanico, base_oficina, item_servico):
    """Cria uma guia pelo endpoint base64 e devolve o JSON de criação."""
    def _criar(plate: str = "ABC1234", kilometers: int = 1000, servicos=None, **extra):
        payload = {
            "plate": plate,
            "kilometers": kilometers,
            "base": base_oficina.id,
            "services": servicos if servicos is not None else [
                servico_payload(item_servico.id, photo=PNG_DATA_URI)
            ],
        }
        payload.update(extra)
        resp = client.post("/api/v1/repair-orders-base64", json=payload, headers=headers_mecanico)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _criar


# ==================================================
# HELPERS EXPOSTOS COMO FIXTURES
# ==================================================

@pytest.fixture
def headers_de():
    """headers_de(user) -> header Authorization com a sessão do usuário."""
    return auth_headers


@pytest.fixture
def novo_servico():
    """novo_servico(item_id, **extra) -> serviço no formato do app."""
    return servico_payload


@pytest.fixture
def png():
    return PNG_1X1


@pytest.fixture
def png_data_uri():
    return PNG_DATA_URI


@pytest.fixture
def duracao():
    return dict(DURACAO)
