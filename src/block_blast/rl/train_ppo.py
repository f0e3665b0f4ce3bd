from __future__ import annotations

import argparse
import logging
import os
from typing import Callable, List

import gymnasium as gym

# Ensure envs are registered
import block_blast.env  # noqa: F401
from block_blast.env import ENV_IDS
from block_blast.env.wrappers import FlattenDiscreteActionWrapper, ResampleInvalidActionWrapper
from block_blast.game import Difficulty

logger = logging.getLogger(__name__)


def make_env(env_id: str, masked: bool, seed: int | None = None) -> gym.Env:
    """Discrete-action env for one worker.

    Masked training hands the mask to MaskablePPO; plain PPO gets rejected
    moves swapped for legal ones instead.
    """
    env: gym.Env = FlattenDiscreteActionWrapper(gym.make(env_id))
    if masked:
        from sb3_contrib.common.wrappers import ActionMasker

        env = ActionMasker(env, lambda e: e.get_action_mask())
    else:
        env = ResampleInvalidActionWrapper(env)
    if seed is not None:
        env.reset(seed=seed)
    return env


def worker_factories(env_id: str, n_envs: int, seed: int, masked: bool) -> List[Callable[[], gym.Env]]:
    def factory(i: int) -> Callable[[], gym.Env]:
        return lambda: make_env(env_id, masked, seed=seed + i)

    return [factory(i) for i in range(n_envs)]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Train a PPO agent on Block Blast.")
    p.add_argument("--algo", choices=["ppo", "maskable"], default="maskable")
    p.add_argument("--difficulty", choices=[d.value for d in Difficulty], default=Difficulty.MEDIUM.value)
    p.add_argument("--timesteps", type=int, default=200_000)
    p.add_argument("--logdir", type=str, default="./logs/ppo")
    p.add_argument("--save_path", type=str, default="./models/ppo_blockblast.zip")
    p.add_argument("--checkpoint_every", type=int, default=0,
                   help="Save an intermediate model every N steps per worker (0 disables)")
    p.add_argument("--n_envs", type=int, default=4)
    p.add_argument("--seed", type=int, default=0)
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    # Per-move game logs are too chatty across several workers
    logging.getLogger("block_blast.game").setLevel(logging.WARNING)

    from stable_baselines3.common.callbacks import CheckpointCallback
    from stable_baselines3.common.vec_env import SubprocVecEnv, VecMonitor

    env_id = ENV_IDS[Difficulty(args.difficulty)]
    masked = args.algo == "maskable"
    vec_env = VecMonitor(SubprocVecEnv(worker_factories(env_id, args.n_envs, args.seed, masked)))

    if masked:
        from sb3_contrib import MaskablePPO as Algo
    else:
        from stable_baselines3 import PPO as Algo
    model = Algo(
        policy="MultiInputPolicy",
        env=vec_env,
        verbose=1,
        tensorboard_log=args.logdir,
        seed=args.seed,
    )

    save_dir = os.path.dirname(args.save_path)
    if save_dir:
        os.makedirs(save_dir, exist_ok=True)
    callback = None
    if args.checkpoint_every > 0:
        callback = CheckpointCallback(
            save_freq=args.checkpoint_every,
            save_path=os.path.join(save_dir or ".", "checkpoints"),
            name_prefix=f"{args.algo}_{args.difficulty}",
        )

    logger.info("Training %s on %s for %d timesteps", args.algo, env_id, args.timesteps)
    try:
        model.learn(total_timesteps=args.timesteps, callback=callback)
    finally:
        vec_env.close()
    model.save(args.save_path)
    logger.info("Saved model to %s", args.save_path)


if __name__ == "__main__":  # pragma: no cover
    main()
