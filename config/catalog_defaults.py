"""
Built-in catalog and wizard step order.

The catalog seeds every new session and is what "reset catalog" restores.
Base prices are per m² for material and glass, flat for opening and color.
"""

from models.catalog import Category
from models.wizard import StepType, WizardStep

# =============================================================================
# CATEGORY KEYS
# =============================================================================

MATERIAL = "material"
OPENING = "opening"
GLASS = "glass"
COLOR = "color"

# Imported profiles land in these categories
FRAME_CATEGORY = MATERIAL
SASH_CATEGORY = OPENING

# Preview falls back to these when nothing is selected yet
DEFAULT_PREVIEW_COLOR_ID = "white"
DEFAULT_PREVIEW_OPENING_ID = "battente"


# =============================================================================
# DEFAULT CATALOG
# =============================================================================

DEFAULT_CATEGORIES: dict[str, dict] = {
    MATERIAL: {
        "id": MATERIAL,
        "title": "Materiale Profilo",
        "subtitle": "Scegli il materiale principale per la struttura",
        "options": [
            {
                "id": "pvc",
                "name": "PVC Premium",
                "description": "Eccellente isolamento termico, economico e durevole.",
                "image_url": "https://picsum.photos/id/10/400/300",
                "base_price": 150,
                "price_multiplier": 1.0,
            },
            {
                "id": "wood",
                "name": "Legno Lamellare",
                "description": "Eleganza naturale, perfetto per ambienti classici.",
                "image_url": "https://picsum.photos/id/16/400/300",
                "base_price": 280,
                "price_multiplier": 1.2,
            },
            {
                "id": "alu",
                "name": "Alluminio Taglio Termico",
                "description": "Minimalista, resistente e moderno. Massima luce.",
                "image_url": "https://picsum.photos/id/20/400/300",
                "base_price": 350,
                "price_multiplier": 1.15,
            },
            {
                "id": "alu-wood",
                "name": "Legno / Alluminio",
                "description": "Il calore del legno dentro, la resistenza dell'alluminio fuori.",
                "image_url": "https://picsum.photos/id/24/400/300",
                "base_price": 450,
                "price_multiplier": 1.3,
            },
        ],
    },
    OPENING: {
        "id": OPENING,
        "title": "Tipologia Apertura",
        "subtitle": "Come si deve aprire la tua finestra?",
        "options": [
            {
                "id": "fixed",
                "name": "Fisso",
                "description": "Non apribile. Ideale per vetrine o punti luce.",
                "image_url": "https://picsum.photos/id/42/400/300",
                "base_price": 0,
                "price_multiplier": 0.8,
            },
            {
                "id": "battente",
                "name": "Anta a Battente",
                "description": "Apertura classica interna.",
                "image_url": "https://picsum.photos/id/48/400/300",
                "base_price": 50,
                "price_multiplier": 1.0,
            },
            {
                "id": "vasistas",
                "name": "Vasistas / Ribalta",
                "description": "Apertura superiore per areazione controllata.",
                "image_url": "https://picsum.photos/id/56/400/300",
                "base_price": 80,
                "price_multiplier": 1.1,
            },
            {
                "id": "scorrevole",
                "name": "Scorrevole",
                "description": "Salvaspazio, ideale per grandi vetrate.",
                "image_url": "https://picsum.photos/id/60/400/300",
                "base_price": 200,
                "price_multiplier": 1.5,
            },
        ],
    },
    GLASS: {
        "id": GLASS,
        "title": "Vetrata",
        "subtitle": "Scegli le performance del vetro",
        "options": [
            {
                "id": "double",
                "name": "Doppio Vetro Standard",
                "description": "Camera d'aria standard (Ug 1.1).",
                "image_url": "https://picsum.photos/id/114/400/300",
                "base_price": 50,
                "price_multiplier": 1.0,
            },
            {
                "id": "triple",
                "name": "Triplo Vetro",
                "description": "Massimo isolamento termico (Ug 0.6).",
                "image_url": "https://picsum.photos/id/128/400/300",
                "base_price": 120,
                "price_multiplier": 1.2,
            },
            {
                "id": "acoustic",
                "name": "Vetro Acustico",
                "description": "Ideale per zone trafficate e rumorose.",
                "image_url": "https://picsum.photos/id/180/400/300",
                "base_price": 100,
                "price_multiplier": 1.1,
            },
        ],
    },
    COLOR: {
        "id": COLOR,
        "title": "Finitura e Colore",
        "subtitle": "L'estetica conta",
        "options": [
            {
                "id": "white",
                "name": "Bianco Massa",
                "description": "Standard, pulito e luminoso.",
                "image_url": "https://picsum.photos/id/250/400/300",
                "base_price": 0,
                "price_multiplier": 1.0,
            },
            {
                "id": "anthracite",
                "name": "Grigio Antracite",
                "description": "Moderno ed elegante, effetto satinato.",
                "image_url": "https://picsum.photos/id/260/400/300",
                "base_price": 30,
                "price_multiplier": 1.05,
            },
            {
                "id": "oak",
                "name": "Effetto Quercia",
                "description": "Pellicola effetto legno naturale.",
                "image_url": "https://picsum.photos/id/270/400/300",
                "base_price": 50,
                "price_multiplier": 1.1,
            },
        ],
    },
}


# =============================================================================
# WIZARD STEPS
# =============================================================================

WIZARD_STEPS: tuple[WizardStep, ...] = (
    WizardStep(id="dimensions", type=StepType.DIMENSIONS, title="Misure"),
    WizardStep(id=MATERIAL, type=StepType.SELECTION, title="Materiali", category_id=MATERIAL),
    WizardStep(id=OPENING, type=StepType.SELECTION, title="Apertura", category_id=OPENING),
    WizardStep(id=GLASS, type=StepType.SELECTION, title="Vetri", category_id=GLASS),
    WizardStep(id=COLOR, type=StepType.SELECTION, title="Colori", category_id=COLOR),
)


def build_default_categories() -> dict[str, Category]:
    """Fresh Category models for the built-in catalog (never shared)."""
    return {
        key: Category.model_validate(data)
        for key, data in DEFAULT_CATEGORIES.items()
    }
