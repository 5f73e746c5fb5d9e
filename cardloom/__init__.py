"""
Cardloom - TCG 마켓플레이스 백엔드
"""
