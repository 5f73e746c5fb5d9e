"""
Repository 계층 모듈

DB 접근(조회/저장)만 담당합니다.
"""
