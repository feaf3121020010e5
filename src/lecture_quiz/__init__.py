"""Generate, take and score multiple-choice quizzes from lecture material."""
