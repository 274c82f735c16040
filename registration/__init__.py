"""
Registration Service - Aerobic Gymnastics Tournament Entries

Responsibilities:
- Tournament catalogue and per-kind business rules
- Choreography registration (roster, type/count, quota, eligibility)
- Coach and judge registration
- Batch registration with per-item error collection
- Registration status lifecycle (PENDING -> SUBMITTED -> REGISTERED)
- Gymnast resolution against the FIG registry and local records
"""
