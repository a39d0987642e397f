# fitquest/catalog.py
"""Seed data: reward catalog, starter challenges and milestone achievements."""

PHYSICAL_REWARD_CATEGORY = "Real World"

DEFAULT_REWARDS = [
    {
        "title": "Premium Avatar",
        "description": "Unlock a premium avatar for your profile",
        "category": "Digital",
        "icon": "user-astronaut",
        "points_cost": 200,
    },
    {
        "title": "App Wallpaper",
        "description": "Exclusive app wallpaper pack",
        "category": "Digital",
        "icon": "image",
        "points_cost": 100,
    },
    {
        "title": "$5 Gift Card",
        "description": "Redeem for a $5 digital gift card",
        "category": PHYSICAL_REWARD_CATEGORY,
        "icon": "gift",
        "points_cost": 500,
    },
    {
        "title": "Exclusive Badge",
        "description": "Showcase a rare achievement badge on your profile",
        "category": "Digital",
        "icon": "medal",
        "points_cost": 150,
    },
    {
        "title": "Wireless Earbuds",
        "description": "Perfect for your workouts",
        "category": PHYSICAL_REWARD_CATEGORY,
        "icon": "headphones",
        "points_cost": 750,
    },
]

# Created for every new account
STARTER_CHALLENGES = [
    {
        "title": "Morning Workout",
        "description": "Complete a quick morning workout routine",
        "category": "Fitness",
        "icon": "dumbbell",
        "points": 20,
        "duration": 15,
        "reps": None,
    },
    {
        "title": "Hydration Goal",
        "description": "Drink 8 cups of water today",
        "category": "Hydration",
        "icon": "glass-water",
        "points": 15,
        "duration": None,
        "reps": 8,
    },
    {
        "title": "Mindfulness Break",
        "description": "Take 5 minutes for mindfulness meditation",
        "category": "Mindfulness",
        "icon": "brain",
        "points": 10,
        "duration": 5,
        "reps": None,
    },
    {
        "title": "Healthy Meal",
        "description": "Log a healthy meal with protein and vegetables",
        "category": "Nutrition",
        "icon": "utensils",
        "points": 15,
        "duration": None,
        "reps": None,
    },
]

CHALLENGE_CATEGORIES = ("Fitness", "Hydration", "Mindfulness", "Nutrition", "Sleep")

# code -> achievement fields; unlocked once per user
ACHIEVEMENTS = {
    "first_workout": {
        "title": "First Quest",
        "description": "Completed your first workout",
        "icon": "trophy",
    },
    "first_challenge": {
        "title": "Challenger",
        "description": "Completed your first challenge",
        "icon": "flag",
    },
    "first_reward": {
        "title": "Collector",
        "description": "Redeemed your first reward",
        "icon": "gift",
    },
}
