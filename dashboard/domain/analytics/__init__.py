"""Dashboard analytics - KPIs, category mix, CAC and daily snapshots"""
