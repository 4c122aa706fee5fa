"""
Sample network used to seed the in-memory store.

Every sample account uses the password ``password123``.
"""
from datetime import datetime, timedelta

SAMPLE_PASSWORD = "password123"

_AVATAR = "https://images.unsplash.com/photo-{}?auto=format&fit=facearea&facepad=2&w=256&h=256&q=80"

SAMPLE_USERS = [
    {
        "username": "alexmorgan",
        "email": "alex@example.com",
        "name": "Alex Morgan",
        "bio": "Tech entrepreneur focused on creating innovative solutions",
        "location": "San Francisco, CA",
        "headline": "Tech Founder & Product Strategist",
        "company": "TechSprint",
        "avatar_url": _AVATAR.format("1472099645785-5658abf4ff4e"),
        "user_type": "entrepreneur",
        "profile_completion": 78,
    },
    {
        "username": "jessicawilson",
        "email": "jessica@example.com",
        "name": "Jessica Wilson",
        "bio": "Angel investor with a focus on fintech startups",
        "location": "New York, NY",
        "headline": "Angel Investor • FinTech",
        "company": "Wilson Investments",
        "avatar_url": _AVATAR.format("1517841905240-472988babdf9"),
        "user_type": "investor",
        "profile_completion": 90,
    },
    {
        "username": "davidkim",
        "email": "david@example.com",
        "name": "David Kim",
        "bio": "Backend developer specializing in AI solutions",
        "location": "Austin, TX",
        "headline": "Backend Developer • AI",
        "company": "AI Solutions",
        "avatar_url": _AVATAR.format("1519244703995-f4e0f30006d5"),
        "user_type": "entrepreneur",
        "profile_completion": 65,
    },
    {
        "username": "robertjohnson",
        "email": "robert@example.com",
        "name": "Robert Johnson",
        "bio": "CTO with experience scaling tech platforms",
        "location": "Seattle, WA",
        "headline": "CTO • SaaS Platform",
        "company": "SaaS Solutions",
        "avatar_url": _AVATAR.format("1463453091185-61582044d556"),
        "user_type": "entrepreneur",
        "profile_completion": 85,
    },
    {
        "username": "michaelfoster",
        "email": "michael@example.com",
        "name": "Michael Foster",
        "bio": "Tech recruiter and startup advisor",
        "location": "Boston, MA",
        "headline": "Tech Recruiter & Startup Advisor",
        "company": "Foster Recruiting",
        "avatar_url": _AVATAR.format("1506794778202-cad84cf45f1d"),
        "user_type": "entrepreneur",
        "profile_completion": 70,
    },
    {
        "username": "sarahwilliams",
        "email": "sarah@example.com",
        "name": "Sarah Williams",
        "bio": "Founder of EcoTrack, a sustainability monitoring platform",
        "location": "Portland, OR",
        "headline": "Founder • Green Tech",
        "company": "EcoTrack",
        "avatar_url": _AVATAR.format("1494790108377-be9c29b29330"),
        "user_type": "entrepreneur",
        "profile_completion": 80,
    },
]

# (owner username, project fields)
SAMPLE_PROJECTS = [
    ("alexmorgan", {
        "title": "TechSprint Mobile App",
        "description": "A mobile application for tech entrepreneurs to connect and find resources in their local area.",
        "status": "active",
        "looking_for": "Backend Developer, UI/UX Designer",
        "tags": ["Mobile App", "React Native", "Startup"],
    }),
    ("alexmorgan", {
        "title": "InvestorMatch Platform",
        "description": "A platform to match early-stage startups with relevant angel investors based on industry and investment criteria.",
        "status": "planning",
        "looking_for": "Co-founder, Technical Lead, Angel Investors",
        "tags": ["Web Platform", "FinTech", "Angel Investment"],
    }),
    ("sarahwilliams", {
        "title": "EcoTrack Platform",
        "description": "A sustainability monitoring platform for businesses to track and improve their environmental impact.",
        "status": "active",
        "looking_for": "CTO, Backend Developers",
        "tags": ["Green Tech", "Sustainability", "SaaS"],
    }),
]

# Resource grid for alexmorgan: category -> (have, need)
SAMPLE_RESOURCE_GRID = {
    "money": (["Seed Investment Experience"], ["Series A Capital", "Angel Investors"]),
    "tech_skills": (["Product Strategy", "UX/UI Design"], ["Backend Development", "DevOps"]),
    "financial_skills": (["Budget Planning"], ["Tax Strategy", "Investment Structuring"]),
    "social_network": (["Tech Startup Connections", "Product Managers"], ["VC Connections", "Industry Advisors"]),
    "business_skills": (["Growth Marketing", "Business Development"], ["Financial Modeling", "Legal Expertise"]),
    "marketing_skills": (["Social Media Marketing", "SEO"], ["Content Marketing", "PR Connections"]),
    "legal_expertise": ([], ["IP Protection", "Contract Negotiation"]),
}

SAMPLE_SKILLS = [
    ("alexmorgan", "Product Management", 95),
    ("alexmorgan", "Startup Growth", 85),
    ("alexmorgan", "Marketing Strategy", 80),
    ("alexmorgan", "UX Design", 75),
]

# (author, content, tags, type, age)
SAMPLE_POSTS = [
    ("michaelfoster",
     "Looking for a frontend developer with React experience to join our team at FinTech Innovations. "
     "We're building a platform for small businesses to access financial tools. Great opportunity for "
     "someone looking to grow in the fintech space.",
     ["React", "Frontend", "FinTech"], "opportunity", timedelta(hours=3)),
    ("sarahwilliams",
     "Just closed our seed round for EcoTrack, a sustainability monitoring platform for businesses! Now "
     "looking to connect with experienced CTOs and backend developers who have scaled similar solutions. "
     "Also interested in meeting potential advisors with experience in the green tech space.",
     ["Sustainability", "Green Tech", "Seed Stage"], "update", timedelta(hours=8)),
]

# (requester, recipient, status, age)
SAMPLE_CONNECTIONS = [
    ("alexmorgan", "jessicawilson", "accepted", timedelta(days=5)),
    ("alexmorgan", "davidkim", "pending", timedelta(days=2)),
]

# (sender, recipient, content, is_read, age)
SAMPLE_MESSAGES = [
    ("jessicawilson", "alexmorgan",
     "Hi Alex, I saw your InvestorMatch project and I'm interested in learning more. "
     "Could we set up a call next week?", True, timedelta(days=2)),
    ("alexmorgan", "jessicawilson",
     "Hi Jessica, absolutely! I'm available Monday or Tuesday afternoon. Let me know what works for you.",
     True, timedelta(days=1)),
    ("jessicawilson", "alexmorgan",
     "Tuesday at 2pm works for me. I'll send a calendar invite with a video call link.",
     False, timedelta(hours=12)),
]


def ago(delta: timedelta) -> datetime:
    return datetime.utcnow() - delta
