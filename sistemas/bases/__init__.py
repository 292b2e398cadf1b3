# sistemas/bases
"""
Cadastro de bases (oficinas/garagens) e seus endereços.
"""
