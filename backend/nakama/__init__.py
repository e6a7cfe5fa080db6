"""
NAKAMA - User Discovery Query Engine
気の合う仲間を見つけるためのユーザー探索エンジン
"""
