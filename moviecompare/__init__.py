"""영화 최저가 비교 서비스"""

__version__ = "1.0.0"
