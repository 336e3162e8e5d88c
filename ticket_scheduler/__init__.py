"""
Agendador de Tickets por Sprint

Este pacote implementa um sistema para priorizar tickets interdependentes e distribuí-los
entre times com velocidade limitada, sprint a sprint, respeitando dependências, times
elegíveis e a vazão (velocity) de cada time.
"""

__version__ = "1.0.0"
