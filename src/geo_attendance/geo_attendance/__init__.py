"""Geo-attendance package.

Geofenced, face-verified attendance check-in for a multi-tenant workforce
application, organized by feature modules (geofences, faces, attendance,
checkin, members) with a thin Flask controller layer over service/repository
layers.
"""
