# sistemas/repair_orders
"""
Guias de remessa (ordens de reparo): cabeçalho, serviços, ciclo de status,
totais financeiros e exportação em PDF.
"""
