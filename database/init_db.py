# database/init_db.py
"""
Inicialização do banco de dados e seed do orçamentista inicial
"""

import time
from sqlalchemy.exc import OperationalError
from sqlalchemy import text
from database.connection import engine, Base, SessionLocal
from auth.models import User, UserStatus, UserType
from auth.security import get_password_hash
from config import ADMIN_CPF, ADMIN_EMAIL, ADMIN_NAME, ADMIN_PASSWORD

# Importa modelos para criar tabelas
from sistemas.bases.models import Base as BaseOficina, BaseAddress  # noqa: F401
from sistemas.service_items.models import ServiceItem  # noqa: F401
from sistemas.repair_orders.models import RepairOrder, RepairOrderService  # noqa: F401


def wait_for_db(max_retries=10, delay=3):
    """Aguarda o banco de dados ficar disponível"""
    for attempt in range(max_retries):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            print("✅ Conexão com banco de dados estabelecida!")
            return True
        except OperationalError as e:
            if attempt < max_retries - 1:
                print(f"⏳ Aguardando banco de dados... tentativa {attempt + 1}/{max_retries}")
                time.sleep(delay)
            else:
                print(f"❌ Não foi possível conectar ao banco após {max_retries} tentativas")
                raise e
    return False


def create_tables():
    """Cria todas as tabelas no banco de dados"""
    Base.metadata.create_all(bind=engine)
    print("✅ Tabelas criadas com sucesso!")


def seed_admin(session_factory=SessionLocal):
    """
    Cria o orçamentista inicial (já aprovado) quando não há nenhum usuário.

    Sem ele ninguém conseguiria aprovar os cadastros, que sempre nascem
    pendentes.
    """
    db = session_factory()
    try:
        if db.query(User).count() > 0:
            print("ℹ️  Usuários já cadastrados, seed do administrador ignorado.")
            return None

        admin = User(
            name=ADMIN_NAME,
            cpf=ADMIN_CPF,
            email=ADMIN_EMAIL,
            hashed_password=get_password_hash(ADMIN_PASSWORD),
            type=UserType.BUDGETIST.value,
            status=UserStatus.APPROVED.value,
        )
        db.add(admin)
        db.commit()
        print(f"✅ Orçamentista inicial '{ADMIN_EMAIL}' criado com sucesso!")
        print("   ⚠️  Defina ADMIN_PASSWORD no ambiente de produção!")
        return admin.id
    finally:
        db.close()


def init_database():
    """Inicializa o banco de dados completo"""
    print("🔧 Inicializando banco de dados...")
    wait_for_db()
    create_tables()
    seed_admin()
    print("✅ Banco de dados inicializado!")


if __name__ == "__main__":
    init_database()
