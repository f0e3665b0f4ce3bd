from __future__ import annotations

import argparse
import logging
import random

import gymnasium as gym

import block_blast.env  # noqa: F401  ensure registration

logger = logging.getLogger(__name__)


def run_random(env_id: str = "BlockBlast-8x8-v0", steps: int = 200, seed: int = 0) -> float:
    rng = random.Random(seed)
    env = gym.make(env_id)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    episodes = 0
    for _ in range(steps):
        # Prefer valid actions if available
        valid = info.get("valid_actions", [])
        if valid:
            action = rng.choice(valid)
        else:
            action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            episodes += 1
            logger.info("Episode %d finished: score=%d level=%d", episodes, info["score"], info["level"])
            obs, info = env.reset()
    env.close()
    return total_reward


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--env", type=str, default="BlockBlast-8x8-v0")
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--seed", type=int, default=0)
    args = p.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    total = run_random(args.env, args.steps, args.seed)
    print(f"Random agent total reward: {total:.2f}")


if __name__ == "__main__":  # pragma: no cover
    main()
