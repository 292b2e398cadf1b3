# sistemas/bi
"""
Indicadores do painel: guias por status e por mês, serviços por base e
por categoria, e valores consolidados.
"""
