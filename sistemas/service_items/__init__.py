# sistemas/service_items
"""
Catálogo de itens de serviço (mão de obra/peças com valor de referência).
"""
