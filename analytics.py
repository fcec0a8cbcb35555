# Placeholder until a search console integration exists; nothing here is measured.


def mock_analytics() -> dict:
    return {
        "total_views": 15420,
        "monthly_views": 3240,
        "total_visitors": 8950,
        "monthly_visitors": 1890,
        "total_posts": 12,
        "published_posts": 8,
        "top_pages": [
            {"page": "/", "views": 4520, "clicks": 320},
            {"page": "/projects", "views": 3210, "clicks": 280},
            {"page": "/blog", "views": 2890, "clicks": 240},
            {"page": "/about", "views": 2340, "clicks": 180},
            {"page": "/skills", "views": 1890, "clicks": 150},
        ],
        "search_queries": [
            {"query": "devops engineer portfolio", "impressions": 1200, "clicks": 45, "ctr": 3.75},
            {"query": "next.js developer", "impressions": 980, "clicks": 38, "ctr": 3.88},
            {"query": "docker kubernetes tutorial", "impressions": 850, "clicks": 32, "ctr": 3.76},
            {"query": "full stack developer", "impressions": 720, "clicks": 28, "ctr": 3.89},
            {"query": "typescript projects", "impressions": 650, "clicks": 25, "ctr": 3.85},
        ],
        "recent_activity": [
            {"type": "view", "description": "New page view on /projects", "date": "2 hours ago"},
            {"type": "search", "description": "Appeared in search for 'devops portfolio'", "date": "5 hours ago"},
            {"type": "view", "description": "Blog post viewed: 'Building Microservices'", "date": "1 day ago"},
            {"type": "click", "description": "Click from Google search", "date": "1 day ago"},
            {"type": "view", "description": "Portfolio project viewed", "date": "2 days ago"},
        ],
        "mock": True,
    }
