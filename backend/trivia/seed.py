from trivia import db
from trivia.models import Question, User
from trivia.validation import validate_question_payload

DEMO_USERS = ['testuser1', 'testuser2', 'testuser3']

# (prompt, choices, correct index, difficulty); all in the "Shonen" category
SHONEN = [
    ("Which anime features the 'Hunter Exam' early in the story?", ["Bleach", "Hunter x Hunter", "Naruto", "One Piece"], 1, 1),
    ("In 'Death Note', what is the shinigami's name attached to Light?", ["Ryuk", "Rem", "Sidoh", "Gelus"], 0, 1),
    ("Who is Naruto's teacher and leader of Team 7?", ["Iruka", "Kakashi", "Jiraiya", "Asuma"], 1, 1),
    ("What is the name of Luffy's hat in One Piece?", ["Pirate Hat", "Straw Hat", "Treasure Hat", "Sun Hat"], 1, 1),
    ("What planet does Goku grow up on?", ["Namek", "Earth", "Vegeta", "Mars"], 1, 1),
    ("What is Gon's best friend's name in Hunter x Hunter?", ["Kurapika", "Leorio", "Killua", "Hisoka"], 2, 1),
    ("What power allows Luffy to stretch his body?", ["Flame-Flame Fruit", "Gum-Gum Fruit", "Dark-Dark Fruit", "Ice-Ice Fruit"], 1, 2),
    ("What is the name of Inuyasha's sword?", ["Zangetsu", "Tessaiga", "Enma", "Dragon Slayer"], 1, 2),
    ("Who trains Goku and Krillin in early Dragon Ball?", ["Master Roshi", "King Kai", "Beerus", "Piccolo"], 0, 2),
    ("What is Killua's family famous for in Hunter x Hunter?", ["Hunters", "Assassins", "Pirates", "Ninjas"], 1, 2),
    ("What is the name of Naruto's tailed beast?", ["Shukaku", "Kurama", "Gyuki", "Matatabi"], 1, 2),
    ("What is the name of Luffy's brother who uses fire powers?", ["Sabo", "Ace", "Shanks", "Law"], 1, 3),
    ("Who defeats Frieza on Planet Namek?", ["Vegeta", "Gohan", "Goku", "Piccolo"], 2, 3),
    ("What is the name of the detective who succeeds L in Death Note?", ["Near", "Mello", "Watari", "Soichiro"], 0, 3),
    ("What ability allows characters to use aura in Hunter x Hunter?", ["Chakra", "Nen", "Haki", "Ki"], 1, 3),
    ("What is the name of Naruto's father?", ["Jiraiya", "Minato Namikaze", "Hiruzen", "Tobirama"], 1, 3),
    ("Which Warlord first defeats Luffy in One Piece?", ["Doflamingo", "Crocodile", "Mihawk", "Kuma"], 1, 4),
    ("What is Sesshomaru's sword called?", ["Tensaiga", "Tessaiga", "Bakusaiga", "Zangetsu"], 0, 4),
    ("What alias does Light use as the killer in Death Note?", ["L", "Ryuk", "Kira", "Zero"], 2, 4),
    ("Who kills Cell in Dragon Ball Z?", ["Goku", "Vegeta", "Gohan", "Trunks"], 2, 4),
    ("What Nen category does Gon belong to?", ["Emitter", "Enhancer", "Manipulator", "Transmuter"], 1, 4),
    ("What is the name of the Nine-Tails' jinchuriki before Naruto?", ["Kushina Uzumaki", "Mito Uzumaki", "Rin Nohara", "Tsunade"], 1, 5),
    ("What is the name of the island where Luffy trained during the time skip?", ["Dressrosa", "Wano", "Rusukaina", "Zou"], 2, 5),
    ("What race is Frieza?", ["Saiyan", "Namekian", "Frieza Race", "Android"], 2, 5),
    ("Who is the God of Destruction of Universe 7?", ["Whis", "Beerus", "Zeno", "Champa"], 1, 5),
    ("What is the name of Gon's father?", ["Silva", "Ging", "Kite", "Illumi"], 1, 5),
]


def seed_users(password='password'):
    for name in DEMO_USERS:
        if User.query.filter_by(username=name).first():
            continue
        user = User(username=name, email=f'{name}@example.com')
        user.set_password(password)
        db.session.add(user)
    db.session.commit()


def seed_questions(category='Shonen'):
    """Insert the bundled bank, skipping prompts already present."""
    existing = {p for (p,) in db.session.query(Question.prompt).filter_by(category=category)}
    added = 0
    for prompt, choices, correct_index, difficulty in SHONEN:
        if prompt in existing:
            continue
        fields = validate_question_payload({
            'prompt': prompt,
            'choices': choices,
            'correctIndex': correct_index,
            'category': category,
            'difficulty': difficulty,
        })
        db.session.add(Question(**fields))
        added += 1
    db.session.commit()
    return added
