"""
Setup script para instalação do projeto Portal Frota.

Este arquivo permite instalar o projeto em modo editable para desenvolvimento:
    pip install -e .[test]

Isso adiciona o projeto ao PYTHONPATH e permite imports como:
    from sistemas.repair_orders.financeiro import calcular_totais
"""

from setuptools import setup, find_namespace_packages

setup(
    name="portal-frota",
    version="1.0.0",
    description="Portal Frota - Guias de remessa de manutenção de frota",
    # database, utils, users e sistemas não têm __init__.py
    packages=find_namespace_packages(
        include=["auth*", "database*", "middleware*", "users*", "utils*", "sistemas*"],
    ),
    py_modules=["config", "main"],
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "sqlalchemy>=2.0",
        "pydantic>=2.5",
        "email-validator>=2.0",
        "python-dotenv>=1.0",
        "python-jose[cryptography]>=3.3",
        "bcrypt>=4.0",
        "python-multipart>=0.0.9",
        "jinja2>=3.1",
        "structlog>=24.1",
        "slowapi>=0.1.9",
        "pytz>=2024.1",
        "reportlab>=4.0",
        "werkzeug>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "httpx>=0.27",
        ],
    },
)
