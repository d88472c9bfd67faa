"""
Constants and prompt templates for the Project Hub application.
"""

# System instruction for the project assistant. Literal braces are doubled for str.format.
ASSISTANT_SYSTEM_INSTRUCTION = """You are a methodical project-planning assistant for home-improvement and DIY projects.
Work through the user's request step by step and give practical, safe, concrete guidance.

Respond with ONE JSON object and nothing else. No markdown, no code fences, no text before or after it.
The object must have exactly these four fields:
{{
  "summary": "<short answer to the user's request>",
  "materials": ["<material or tool>", ...],
  "steps": ["<next step>", ...],
  "questions": ["<research query>", ...]
}}

"materials" and "steps" may be empty lists when they do not apply.
"questions" must contain 3 to 4 internal research queries that YOU should investigate to deepen and verify
your own answer (codes, load ratings, compatibility, safety). They are NOT clarifying questions for the user.

The project's current checklist (do not suggest steps that are already on it):
{todos}

The project's current materials (do not suggest materials that are already listed):
{materials}"""

# Expected number of research queries in a reply.
MIN_RESEARCH_QUESTIONS = 3
MAX_RESEARCH_QUESTIONS = 4

# Generic message shown when the assistant fails. Provider errors are never returned to clients.
ASSISTANT_UNAVAILABLE_MESSAGE = "The assistant is temporarily unavailable. Please try again later."

# Curated suggestions for the home tab.
PROJECT_IDEAS = [
    {
        "id": 1,
        "title": "Floating Wall Shelves",
        "description": "Add storage and display space with hidden-bracket shelves cut from solid pine.",
        "imageUrl": "/static/ideas/floating-shelves.jpg",
        "time": "4-6 hours",
        "cost": "$60-$120",
        "materials": ["1x8 pine boards", "hidden shelf brackets", "wood screws", "wall anchors", "stain or paint"],
    },
    {
        "id": 2,
        "title": "Raised Garden Bed",
        "description": "Build a cedar raised bed for vegetables or flowers with better drainage and fewer weeds.",
        "imageUrl": "/static/ideas/raised-garden-bed.jpg",
        "time": "1 day",
        "cost": "$100-$200",
        "materials": ["cedar boards", "corner posts", "exterior screws", "landscape fabric", "garden soil"],
    },
    {
        "id": 3,
        "title": "Kitchen Backsplash",
        "description": "Refresh the kitchen with a peel-and-stick or ceramic subway tile backsplash.",
        "imageUrl": "/static/ideas/kitchen-backsplash.jpg",
        "time": "1-2 days",
        "cost": "$150-$400",
        "materials": ["subway tile", "tile adhesive", "grout", "tile spacers", "caulk"],
    },
    {
        "id": 4,
        "title": "Basic Bookshelf",
        "description": "A sturdy five-shelf bookcase built from plywood with a simple dado joint design.",
        "imageUrl": "/static/ideas/bookshelf.jpg",
        "time": "1 weekend",
        "cost": "$80-$150",
        "materials": ["3/4in plywood", "wood glue", "finish nails", "edge banding", "polyurethane"],
    },
    {
        "id": 5,
        "title": "Deck Refinishing",
        "description": "Clean, sand and reseal a weathered deck to protect it for the next few seasons.",
        "imageUrl": "/static/ideas/deck-refinishing.jpg",
        "time": "2 days",
        "cost": "$120-$250",
        "materials": ["deck cleaner", "orbital sander", "sandpaper", "deck stain", "stain brushes"],
    },
]
