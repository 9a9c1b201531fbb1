"""
Interaction Cluster Dictionary — the fixed groups of phrases used to
categorize drug-label interaction text by safety concern.

Each cluster has an id, a display label and an ordered list of phrases.
Phrases are matched case-insensitively on whole words; internal whitespace in
a phrase matches any run of whitespace in the label text.

ORDER MATTERS:
- Cluster order is the tie-break when two clusters match the same number of
  labels (earlier definition ranks first).
- Phrase order decides which representative terms a cluster reports.

The dictionary is immutable for the process lifetime. medsafe/cluster_matcher
compiles every phrase once at import time.
"""

from typing import NamedTuple


class ClusterDefinition(NamedTuple):
    id: str
    label: str
    patterns: tuple[str, ...]


CLUSTER_DEFINITIONS: tuple[ClusterDefinition, ...] = (
    # ── Bleeding ────────────────────────────────────────────────────────────
    ClusterDefinition(
        id="bleeding",
        label="Bleeding Risk",
        patterns=(
            "bleeding", "hemorrhage", "hemorrhagic", "anticoagulant", "warfarin",
            "blood clotting", "coagulation", "platelet", "thrombosis", "clotting",
            "aspirin", "clopidogrel", "heparin", "enoxaparin", "rivaroxaban",
            "apixaban", "dabigatran", "edoxaban",
        ),
    ),
    # ── Serotonergic ────────────────────────────────────────────────────────
    ClusterDefinition(
        id="serotonin",
        label="Serotonin Syndrome",
        patterns=(
            "serotonin", "serotonin syndrome", "ssri", "sri", "maoi",
            "tramadol", "meperidine", "fentanyl", "dextromethorphan",
            "triptan", "sumatriptan", "linezolid", "methylene blue",
        ),
    ),
    # ── Sedation / CNS ──────────────────────────────────────────────────────
    ClusterDefinition(
        id="cns_depression",
        label="CNS Depression",
        patterns=(
            "cns depression", "central nervous system depression", "sedation",
            "respiratory depression", "opioid", "benzodiazepine", "barbiturate",
            "alcohol", "ethanol", "drowsiness", "somnolence", "hypnotic",
            "anesthesia", "anesthetic",
        ),
    ),
    # ── Cardiac rhythm ──────────────────────────────────────────────────────
    ClusterDefinition(
        id="qt_prolongation",
        label="QT Prolongation",
        patterns=(
            "qt prolongation", "qt interval", "torsades", "torsade de pointes",
            "arrhythmia", "cardiac arrhythmia", "prolonged qt", "qtc",
            "quinidine", "sotalol", "amiodarone", "dofetilide", "ibutilide",
            "erythromycin", "clarithromycin", "azithromycin", "levofloxacin",
            "moxifloxacin", "haloperidol", "thioridazine", "ziprasidone",
        ),
    ),
    # ── Kidney ──────────────────────────────────────────────────────────────
    ClusterDefinition(
        id="renal",
        label="Renal Impairment",
        patterns=(
            "renal impairment", "renal function", "kidney", "nephrotoxic",
            "nephrotoxicity", "creatinine", "glomerular filtration", "gfr",
            "renal clearance", "renal failure", "acute kidney injury", "aki",
            "chronic kidney disease", "ckd", "dialysis",
        ),
    ),
    # ── Metabolism ──────────────────────────────────────────────────────────
    ClusterDefinition(
        id="cyp",
        label="CYP Enzyme Interactions",
        patterns=(
            "cyp3a4", "cyp2d6", "cyp2c9", "cyp2c19", "cyp1a2", "cyp2b6",
            "cytochrome p450", "cyp enzyme", "enzyme inhibitor", "enzyme inducer",
            "grapefruit", "ketoconazole", "itraconazole", "voriconazole",
            "fluconazole", "erythromycin", "clarithromycin", "rifampin",
            "rifampicin", "phenytoin", "carbamazepine", "phenobarbital",
        ),
    ),
)


def get_cluster_ids() -> list[str]:
    """Return cluster ids in definition order."""
    return [cluster.id for cluster in CLUSTER_DEFINITIONS]
