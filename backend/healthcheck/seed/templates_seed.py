# backend/healthcheck/seed/templates_seed.py
from __future__ import annotations

"""
Starter templates and equipment for a demo plant.

Shapes match the JSON import format (camelCase keys), so the same dicts can be
dumped to a file and re-imported with `python -m healthcheck.cli --templates-file`.
"""

TEMPLATES = [
    dict(
        id="TPL-COMP-001",
        equipmentType="compresseur",
        title="Inspection compresseur d'air",
        description="Contrôle mensuel des compresseurs à vis.",
        version="1.2",
        frequency="monthly",
        estimatedDuration=45,
        requiredCertifications=["habilitation_mecanique"],
        requiredPPE=["casque", "gants", "protection_auditive"],
        sections=[
            dict(
                name="Sécurité",
                items=[
                    dict(id="comp_arret_urgence", type="boolean", check="Arrêt d'urgence fonctionnel"),
                    dict(id="comp_carter", type="boolean", check="Carters de protection en place"),
                ],
            ),
            dict(
                name="Mesures",
                items=[
                    dict(id="comp_pression", type="number", check="Pression de sortie (bar)", range=dict(min=6, max=8)),
                    dict(id="comp_temperature", type="number", check="Température huile (°C)", range=dict(min=60, max=95)),
                    dict(id="comp_heures", type="number", check="Compteur horaire"),
                ],
            ),
            dict(
                name="État général",
                items=[
                    dict(
                        id="comp_fuites",
                        type="select",
                        check="Fuites d'huile",
                        options=[
                            dict(value="aucune", label="Aucune"),
                            dict(value="legere", label="Légère"),
                            dict(value="importante", label="Importante", acceptable=False),
                        ],
                    ),
                    dict(id="comp_observations", type="textarea", check="Observations"),
                    dict(id="comp_photo", type="file", check="Photo de la plaque"),
                ],
            ),
        ],
        scoringRules=dict(passThreshold=90, alertThreshold=60),
    ),
    dict(
        id="TPL-POMPE-001",
        equipmentType="pompe",
        title="Inspection pompe centrifuge",
        version="1.0",
        frequency="weekly",
        estimatedDuration=20,
        requiredPPE=["gants"],
        sections=[
            dict(
                name="Fonctionnement",
                items=[
                    dict(id="pompe_bruit", type="boolean", check="Absence de bruit anormal"),
                    dict(id="pompe_vibration", type="number", check="Vibrations (mm/s)", range=dict(min=0, max=4.5)),
                    dict(
                        id="pompe_garniture",
                        type="select",
                        check="État garniture mécanique",
                        options=[
                            dict(value="bon", label="Bon"),
                            dict(value="use", label="Usé"),
                            dict(value="hs", label="Hors service", acceptable=False),
                        ],
                    ),
                ],
            ),
            dict(
                name="Rapport",
                items=[dict(id="pompe_commentaire", type="textarea", check="Commentaire")],
            ),
        ],
    ),
]

EQUIPMENTS = [
    dict(id="EQ-COMP-01", name="Compresseur A1", type="compresseur_vis", category="compresseur", building="B1", zone="Z1", criticalityLevel="high"),
    dict(id="EQ-COMP-02", name="Compresseur A2", type="compresseur_vis", category="compresseur", building="B1", zone="Z2"),
    dict(id="EQ-POMPE-01", name="Pompe P101", type="pompe_centrifuge", category="pompe", building="B2", zone="Z1"),
    dict(id="EQ-POMPE-02", name="Pompe P102", type="pompe_centrifuge", category="pompe", building="B2", zone="Z3", status="maintenance"),
]
