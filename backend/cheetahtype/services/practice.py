"""Practice text generation aimed at one (usually weak) character.

Words are drawn from pools graded 1-5 and kept or skipped depending on
whether the running share of the target character is under or over the
share asked for by ``focus_intensity``. When the pools cannot reach that
share, short drill words built around the character are spliced in.
"""
import math
import random
from typing import List, Optional

from flask import current_app

from cheetahtype import db
from cheetahtype.errors import ValidationError, storage_errors
from cheetahtype.models import CustomPracticeText, User
from cheetahtype.services.analytics import get_character_analytics

WORD_POOLS = {
    1: ['the', 'and', 'for', 'are', 'but', 'not', 'you', 'all', 'can', 'had', 'her', 'was', 'one',
        'our', 'out', 'day', 'get', 'has', 'him', 'his', 'how', 'man', 'new', 'now', 'old', 'see',
        'two', 'way', 'who', 'boy', 'did', 'its', 'let', 'put', 'say', 'she', 'too', 'use'],
    2: ['that', 'with', 'have', 'this', 'will', 'your', 'from', 'they', 'know', 'want', 'been',
        'good', 'much', 'some', 'time', 'very', 'when', 'come', 'here', 'just', 'like', 'long',
        'make', 'many', 'over', 'such', 'take', 'than', 'them', 'well', 'were'],
    3: ['there', 'would', 'their', 'could', 'other', 'after', 'first', 'never', 'these', 'think',
        'where', 'being', 'every', 'great', 'might', 'shall', 'still', 'those', 'under', 'while',
        'again', 'place', 'right', 'years', 'before', 'should', 'through'],
    4: ['people', 'before', 'should', 'through', 'another', 'between', 'thought', 'nothing',
        'without', 'because', 'something', 'important', 'different', 'following', 'government',
        'information', 'development', 'performance', 'understanding'],
    5: ['character', 'practice', 'strength', 'challenge', 'difficulty', 'improvement', 'technology',
        'generation', 'communication', 'organization', 'responsibility', 'administration',
        'recommendation', 'transformation', 'comprehensive'],
}

CHARACTER_WORDS = {
    's': ['see', 'said', 'just', 'such', 'also', 'still', 'some', 'same', 'seem', 'since'],
    't': ['the', 'that', 'time', 'take', 'tell', 'think', 'than', 'them', 'this', 'turn'],
    'r': ['are', 'right', 'rather', 'really', 'return', 'read', 'remember', 'reason', 'result', 'recent'],
    'n': ['and', 'not', 'now', 'new', 'never', 'need', 'next', 'name', 'number', 'nothing'],
    'l': ['like', 'long', 'look', 'let', 'line', 'little', 'last', 'left', 'level', 'live'],
    'e': ['every', 'even', 'each', 'early', 'end', 'enough', 'example', 'experience', 'ever', 'else'],
    'a': ['and', 'are', 'all', 'any', 'about', 'after', 'also', 'again', 'always', 'another'],
    'o': ['of', 'or', 'on', 'one', 'only', 'other', 'over', 'own', 'open', 'old'],
    'i': ['is', 'in', 'it', 'if', 'into', 'its', 'idea', 'important', 'include', 'interest'],
}

FOCUS_SHARE = {'low': 0.15, 'medium': 0.25, 'high': 0.4}


def character_frequency(text: str, character: str) -> float:
    """Share of ``text`` (spaces included) that is ``character``, case-insensitive."""
    if not text:
        return 0.0
    return text.lower().count(character.lower()) / len(text)


def drill_words(character: str, count: int, rng: random.Random) -> List[str]:
    char = character.lower()
    patterns = [
        char + 'at', char + 'ed', char + 'er', char + 'ly', char + 'ing',
        'a' + char, 'e' + char, 'i' + char, 'o' + char, 'u' + char,
        char + 'a', char + 'e', char + 'i', char + 'o', char + 'u',
    ]
    known = CHARACTER_WORDS.get(char, [])
    words = []
    for _ in range(count):
        if known and rng.random() > 0.5:
            words.append(rng.choice(known))
        else:
            words.append(rng.choice(patterns))
    return words


def generate_practice_text(character: str, difficulty_level: int = 1, word_count: int = 50,
                           focus_intensity: str = 'medium', rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    share = FOCUS_SHARE.get(focus_intensity, FOCUS_SHARE['medium'])
    target = character.lower()
    top_level = min(difficulty_level + 1, 5)

    words: List[str] = []
    current = 0.0
    for _ in range(word_count * 3):
        if len(words) >= word_count:
            break
        word = rng.choice(WORD_POOLS[rng.randint(1, top_level)])
        hits = word.count(target)
        if current < share:
            keep = hits > 0 or rng.random() > 0.7
        else:
            keep = hits == 0 or rng.random() > 0.8
        if keep:
            words.append(word)
            current = character_frequency(' '.join(words), target)

    if current < share * 0.8:
        split = int(len(words) * 0.8)
        extra = drill_words(target, math.ceil(word_count * 0.2), rng)
        words = words[:split] + extra + words[split:]

    return ' '.join(words)


def weakest_character(user: User) -> Optional[str]:
    analytics = get_character_analytics(user)
    return analytics[0]['character'] if analytics else None


def create_practice_text(user: User, payload, rng: Optional[random.Random] = None) -> CustomPracticeText:
    """Generate and store a practice text; the target defaults to the weakest character."""
    target = payload.target_character
    if target is None:
        with storage_errors('fetch character analytics'):
            target = weakest_character(user)
        if target is None:
            raise ValidationError('No character history yet; target_character is required',
                                  field='target_character')

    text = generate_practice_text(target, payload.difficulty_level, payload.word_count,
                                  payload.focus_intensity, rng=rng)
    practice = CustomPracticeText(
        user_id=user.id,
        target_character=target,
        practice_text=text,
        difficulty_level=payload.difficulty_level,
        word_count=len(text.split()),
        character_frequency=character_frequency(text, target),
    )
    with storage_errors('save practice text'):
        db.session.add(practice)
        db.session.commit()
    current_app.logger.info(
        f"[practice-text] user={user.id} char={target!r} words={practice.word_count} "
        f"focus={payload.focus_intensity}"
    )
    return practice


def list_practice_texts(user: User, character: Optional[str] = None, limit: int = 10) -> List[CustomPracticeText]:
    query = CustomPracticeText.query.filter_by(user_id=user.id, is_active=True)
    if character:
        query = query.filter_by(target_character=character)
    with storage_errors('fetch practice texts'):
        return (
            query.order_by(CustomPracticeText.created_at.desc(), CustomPracticeText.id.desc())
            .limit(max(1, limit))
            .all()
        )
