"""Mindra Gateway -- Agent HTTP 服务（FastAPI）"""
